"""Wires the stores, catalogs, coupon engine and checkout together."""

import logging
from typing import Callable, Optional

import httpx

from .catalog import PackageCatalogCache, ProductCatalogCache
from .checkout import CheckoutGateway, CheckoutOrchestrator, LocalCheckoutGateway
from .config import StorefrontConfig
from .coupons import CouponEngine
from .pricing import PriceCalculator
from .storage import LocalStorage
from .stores import BasketStore, CartStore
from .transitions import Notifier, log_notifier

logger = logging.getLogger(__name__)


class Storefront:
    """
    One user's purchasing funnel.

    Everything is built from explicit arguments; nothing is shared through
    module-level state, so several storefronts can coexist (e.g. in tests).
    With ``checkout_scope="combined"`` the cart and the basket share one
    orchestrator and produce a single order; otherwise each has its own.
    """

    def __init__(
        self,
        config: Optional[StorefrontConfig] = None,
        storage: Optional[LocalStorage] = None,
        notifier: Optional[Notifier] = None,
        is_authenticated: Optional[Callable[[], bool]] = None,
        coupons: Optional[CouponEngine] = None,
        gateway: Optional[CheckoutGateway] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or StorefrontConfig()
        self.storage = storage or LocalStorage(self.config.storage_dir)
        self.notifier = notifier or log_notifier

        self.cart = CartStore(self.storage, notifier=self.notifier)
        self.basket = BasketStore(self.storage, notifier=self.notifier)

        catalog_options = dict(
            timeout=self.config.request_timeout,
            notifier=self.notifier,
            transport=transport,
            min_search_length=self.config.min_search_length,
            max_suggestions=self.config.max_suggestions,
        )
        self.products = ProductCatalogCache(self.storage, self.config.api_base_url, **catalog_options)
        self.packages = PackageCatalogCache(
            self.storage,
            self.config.api_base_url,
            media_base_url=self.config.media_base_url,
            **catalog_options,
        )

        self.coupons = coupons or CouponEngine()
        self.calculator = PriceCalculator(self.coupons)
        # One gateway for both scopes keeps order ids unique across them
        self.gateway = gateway or LocalCheckoutGateway()

        def orchestrator(*stores) -> CheckoutOrchestrator:
            return CheckoutOrchestrator(
                stores,
                self.coupons,
                calculator=self.calculator,
                gateway=self.gateway,
                notifier=self.notifier,
                is_authenticated=is_authenticated,
            )

        if self.config.checkout_scope == "combined":
            self.cart_checkout = self.basket_checkout = orchestrator(self.cart, self.basket)
        else:
            self.cart_checkout = orchestrator(self.cart)
            self.basket_checkout = orchestrator(self.basket)
        logger.info(f"Storefront ready (checkout scope: {self.config.checkout_scope})")

    @classmethod
    def from_env(cls, **kwargs) -> "Storefront":
        return cls(StorefrontConfig.from_env(), **kwargs)

    async def aclose(self) -> None:
        """Cancel outstanding catalog fetches and release HTTP clients."""
        await self.products.aclose()
        await self.packages.aclose()
