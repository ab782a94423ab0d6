"""Data models for tamkeen.center storefront entities."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Product(BaseModel):
    """Represents a one-off product from the catalog."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Product ID")
    name: str = Field(description="Product name")
    description: str = Field(default="", description="Product description")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Unit price")
    stock: int = Field(default=0, description="Units in stock")
    store_id: Optional[int] = Field(None, description="Owning store ID")
    image: Optional[str] = Field(None, description="Product image path")

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value):
        return value or ""

    @property
    def unit_price(self) -> Decimal:
        return self.price


class PackageImage(BaseModel):
    """Image attached to a package, relative to the media base URL."""

    model_config = ConfigDict(frozen=True)

    image: str


class Package(BaseModel):
    """Represents a subscription-style package (basket offer)."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Package ID")
    name: str = Field(description="Package name")
    description: str = Field(default="", description="Package description")
    total_price: Decimal = Field(default=Decimal("0"), ge=0, description="Unit price of the package")
    number_of_uses: int = Field(default=0, description="Uses included in the package")
    profit_percentages: list[Decimal] = Field(
        default_factory=list, description="Tiered profit percentages"
    )
    store_id: Optional[int] = Field(None, description="Owning store ID")
    images: list[PackageImage] = Field(default_factory=list, description="Package images")
    image_url: Optional[str] = Field(None, description="Resolved URL of the first image")

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value):
        return value or ""

    @property
    def unit_price(self) -> Decimal:
        return self.total_price


class CartItem(BaseModel):
    """A product line in the cart."""

    product: Product
    quantity: int = Field(default=1, ge=1, description="Quantity of the product")

    @property
    def id(self) -> int:
        return self.product.id

    @property
    def name(self) -> str:
        return self.product.name

    @property
    def unit_price(self) -> Decimal:
        return self.product.price

    @property
    def store_id(self) -> Optional[int]:
        return self.product.store_id

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class PackageItem(BaseModel):
    """A package line in the basket."""

    package: Package
    quantity: int = Field(default=1, ge=1, description="Quantity of the package")

    @property
    def id(self) -> int:
        return self.package.id

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def unit_price(self) -> Decimal:
        return self.package.total_price

    @property
    def store_id(self) -> Optional[int]:
        return self.package.store_id

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CouponKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(BaseModel):
    """A discount rule from the fixed coupon catalog."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Coupon code, matched case-insensitively")
    discount: Decimal = Field(ge=0, description="Percent off or fixed amount off")
    kind: CouponKind = Field(description="percentage or fixed")
    minimum_purchase: Optional[Decimal] = Field(
        None, ge=0, description="Subtotal required before the coupon applies"
    )


class AppliedCoupon(BaseModel):
    """The active coupon and the subtotal it was validated against."""

    model_config = ConfigDict(frozen=True)

    coupon: Coupon
    subtotal: Decimal


class PriceBreakdown(BaseModel):
    """Derived totals for a set of lines."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    coupon_code: Optional[str] = None


class CheckoutLine(BaseModel):
    """A line as submitted at checkout."""

    model_config = ConfigDict(frozen=True)

    id: int
    kind: str = Field(description="product or package")
    name: str
    unit_price: Decimal
    quantity: int = Field(ge=1)


class CheckoutRequest(BaseModel):
    """Payload handed to a checkout gateway."""

    model_config = ConfigDict(frozen=True)

    lines: list[CheckoutLine]
    coupon_code: Optional[str] = None
    pricing: PriceBreakdown


class OrderStatus(str, Enum):
    PROCESSED = "processed"


class Order(BaseModel):
    """Represents a finalized order. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Order ID")
    status: OrderStatus = Field(default=OrderStatus.PROCESSED, description="Order status")
    total_price: Decimal = Field(description="Amount charged after discount")
    discount: Decimal = Field(default=Decimal("0"), description="Discount applied")
    subtotal: Decimal = Field(description="Amount before discount")
    coupon_code: Optional[str] = Field(None, description="Coupon used, if any")
    store_id: Optional[int] = Field(None, description="Store of the first line")
    lines: list[CheckoutLine] = Field(default_factory=list, description="Checked-out lines")
    message: str = Field(default="Checkout successful")
    created_at: datetime = Field(description="Order creation timestamp")
