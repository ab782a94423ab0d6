"""Cart, basket, coupon and checkout engine for the tamkeen.center storefront."""

from .catalog import PackageCatalogCache, ProductCatalogCache
from .checkout import CheckoutOrchestrator, HttpCheckoutGateway, LocalCheckoutGateway
from .config import StorefrontConfig
from .coupons import CouponEngine
from .pricing import PriceCalculator
from .storage import LocalStorage
from .stores import BasketStore, CartStore
from .storefront import Storefront

__version__ = "0.1.0"

__all__ = [
    "BasketStore",
    "CartStore",
    "CheckoutOrchestrator",
    "CouponEngine",
    "HttpCheckoutGateway",
    "LocalCheckoutGateway",
    "LocalStorage",
    "PackageCatalogCache",
    "PriceCalculator",
    "ProductCatalogCache",
    "Storefront",
    "StorefrontConfig",
]
