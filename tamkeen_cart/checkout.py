"""Checkout: coupon application, totals and order creation."""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Optional, Protocol, Sequence

import httpx

from .coupons import CouponEngine
from .exceptions import (
    AuthenticationRequiredError,
    CouponError,
    EmptyCartError,
    NetworkError,
)
from .models import (
    AppliedCoupon,
    CartItem,
    CheckoutLine,
    CheckoutRequest,
    Order,
    OrderStatus,
    PriceBreakdown,
)
from .pricing import PriceCalculator
from .stores import LineStore
from .transitions import Notifier, log_notifier

logger = logging.getLogger(__name__)


class CheckoutGateway(Protocol):
    """Turns a checkout request into an order."""

    def submit(self, request: CheckoutRequest) -> Order:
        ...


class LocalCheckoutGateway:
    """Synthesizes processed orders in-process. Order ids increase monotonically."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_id = 0

    def _next_id(self) -> int:
        # Microsecond timestamp, bumped when two orders land in the same tick
        self._last_id = max(time.time_ns() // 1000, self._last_id + 1)
        return self._last_id

    def submit(self, request: CheckoutRequest) -> Order:
        return Order(
            id=self._next_id(),
            status=OrderStatus.PROCESSED,
            total_price=request.pricing.total,
            discount=request.pricing.discount,
            subtotal=request.pricing.subtotal,
            coupon_code=request.coupon_code,
            store_id=None,
            lines=request.lines,
            created_at=self.clock(),
        )


class HttpCheckoutGateway:
    """Submits checkouts to the storefront's ``POST /checkout`` endpoint."""

    def __init__(self, base_url: str, timeout: float = 30.0, transport: Optional[httpx.BaseTransport] = None) -> None:
        """
        Initialize the gateway.

        Args:
            base_url: Storefront API root
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the endpoint)
        """
        self.client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def submit(self, request: CheckoutRequest) -> Order:
        """
        Post the checkout and parse the created order.

        Raises:
            NetworkError: If the request fails or the response cannot be parsed
        """
        payload = {
            "lines": [line.model_dump(mode="json") for line in request.lines],
            "couponCode": request.coupon_code,
        }
        logger.info(f"=== CHECKOUT: {len(request.lines)} line(s), coupon={request.coupon_code} ===")
        try:
            response = self.client.post("/checkout", json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NetworkError(f"Checkout request failed: {e}", url="/checkout") from e

        return self._parse_order(data, request)

    def _parse_order(self, data: dict[str, Any], request: CheckoutRequest) -> Order:
        try:
            order_data = data["orders"][0]
            return Order(
                id=order_data["id"],
                status=OrderStatus.PROCESSED,
                total_price=Decimal(str(order_data["total_price"])),
                discount=Decimal(str(data.get("discount", request.pricing.discount))),
                subtotal=Decimal(
                    str(data.get("total_price_before_discount", request.pricing.subtotal))
                ),
                coupon_code=request.coupon_code,
                store_id=order_data.get("store_id"),
                lines=request.lines,
                message=data.get("message", "Checkout successful"),
                created_at=order_data.get("updated_at") or datetime.now(timezone.utc),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise NetworkError(f"Unexpected checkout response: {e}", url="/checkout") from e

    def close(self) -> None:
        self.client.close()


class CheckoutOrchestrator:
    """
    Owns the applied coupon for a checkout scope and finalizes orders.

    A scope is one or more line stores (the cart, the basket, or both). All
    totals are recomputed from the stores on every call.
    """

    def __init__(
        self,
        stores: Sequence[LineStore],
        coupons: CouponEngine,
        calculator: Optional[PriceCalculator] = None,
        gateway: Optional[CheckoutGateway] = None,
        notifier: Optional[Notifier] = None,
        is_authenticated: Optional[Callable[[], bool]] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            stores: Stores whose lines make up this checkout
            coupons: Coupon engine
            calculator: Price calculator (built from the coupon engine if omitted)
            gateway: Order gateway, LocalCheckoutGateway by default
            notifier: Callable receiving (level, message) for user-visible messages
            is_authenticated: Authentication signal; checkout is refused while it returns False
        """
        self.stores = tuple(stores)
        self.coupons = coupons
        self.calculator = calculator or PriceCalculator(coupons)
        self.gateway = gateway or LocalCheckoutGateway()
        self.notifier = notifier or log_notifier
        self.is_authenticated = is_authenticated
        self.applied_coupon: Optional[AppliedCoupon] = None
        self.last_order: Optional[Order] = None

    def lines(self) -> tuple:
        return tuple(line for store in self.stores for line in store.snapshot())

    def is_empty(self) -> bool:
        return all(store.is_empty() for store in self.stores)

    def apply_coupon(self, code: str) -> AppliedCoupon:
        """
        Validate a coupon against the current subtotal and make it the active one.

        A successful application replaces any prior coupon. On failure the
        previous coupon (if any) stays applied.

        Raises:
            EmptyCartError: If there are no lines to discount
            CouponNotFoundError: If the code does not match a coupon
            MinimumNotMetError: If the subtotal is below the coupon's minimum
        """
        if self.is_empty():
            error = EmptyCartError()
            self.notifier("warning", error.message)
            raise error

        subtotal = self.calculator.subtotal(self.lines())
        try:
            coupon = self.coupons.validate(code, subtotal)
        except CouponError as e:
            self.notifier("error", e.message)
            raise

        self.applied_coupon = AppliedCoupon(coupon=coupon, subtotal=subtotal)
        logger.info(f"Applied coupon {coupon.code} to subtotal {subtotal}")
        self.notifier("success", f"Coupon {coupon.code} applied")
        return self.applied_coupon

    def remove_coupon(self) -> None:
        self.applied_coupon = None

    def _refresh_coupon(self, lines: tuple) -> None:
        """Drop or re-snapshot the applied coupon when the subtotal has moved."""
        if self.applied_coupon is None:
            return
        if not lines:
            self.applied_coupon = None
            return

        subtotal = self.calculator.subtotal(lines)
        if subtotal == self.applied_coupon.subtotal:
            return
        try:
            coupon = self.coupons.validate(self.applied_coupon.coupon.code, subtotal)
        except CouponError as e:
            logger.info(f"Dropping coupon {self.applied_coupon.coupon.code}: {e.message}")
            self.applied_coupon = None
            self.notifier("warning", e.message)
            return
        self.applied_coupon = AppliedCoupon(coupon=coupon, subtotal=subtotal)

    def quote(self) -> PriceBreakdown:
        """Current subtotal, discount and total for this scope."""
        lines = self.lines()
        self._refresh_coupon(lines)
        return self.calculator.quote(lines, self.applied_coupon)

    def clear(self) -> None:
        for store in self.stores:
            store.clear()
        self.applied_coupon = None

    def checkout(self) -> Order:
        """
        Finalize the current lines into an order and reset the scope.

        Returns:
            The created order

        Raises:
            AuthenticationRequiredError: If the authentication signal is False
            EmptyCartError: If there is nothing to check out; storage is left untouched
            NetworkError: If a remote gateway fails; the lines are kept
        """
        if self.is_authenticated is not None and not self.is_authenticated():
            raise AuthenticationRequiredError()

        lines = self.lines()
        if not lines:
            self.notifier("warning", "Your cart is empty")
            raise EmptyCartError()

        pricing = self.quote()
        request = CheckoutRequest(
            lines=[
                CheckoutLine(
                    id=line.id,
                    kind="product" if isinstance(line, CartItem) else "package",
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                )
                for line in lines
            ],
            coupon_code=pricing.coupon_code,
            pricing=pricing,
        )

        try:
            order = self.gateway.submit(request)
        except NetworkError as e:
            logger.error(f"Checkout failed: {e}")
            self.notifier("error", "Checkout failed.")
            raise

        if order.store_id is None and lines[0].store_id is not None:
            order = order.model_copy(update={"store_id": lines[0].store_id})

        self.clear()
        self.last_order = order
        logger.info(f"Checkout complete: order={order.id}, total={order.total_price}")
        self.notifier("success", "Checkout successful!")
        return order
