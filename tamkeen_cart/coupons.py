"""Coupon validation and discount computation."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from .exceptions import CouponNotFoundError, MinimumNotMetError
from .models import Coupon, CouponKind

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

DEFAULT_COUPONS: tuple[Coupon, ...] = (
    Coupon(code="SAVE10", discount=Decimal("10"), kind=CouponKind.PERCENTAGE, minimum_purchase=Decimal("50")),
    Coupon(code="SAVE20", discount=Decimal("20"), kind=CouponKind.PERCENTAGE, minimum_purchase=Decimal("100")),
    Coupon(code="FLAT5", discount=Decimal("5"), kind=CouponKind.FIXED),
    Coupon(code="FLAT15", discount=Decimal("15"), kind=CouponKind.FIXED, minimum_purchase=Decimal("75")),
)


def _normalize(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class CouponEngine:
    """Validates coupon codes against a fixed catalog and prices discounts."""

    def __init__(self, coupons: Optional[Iterable[Coupon]] = None) -> None:
        """
        Initialize the engine.

        Args:
            coupons: Coupon catalog. Defaults to DEFAULT_COUPONS.
        """
        catalog = DEFAULT_COUPONS if coupons is None else tuple(coupons)
        self._coupons = {_normalize(coupon.code): coupon for coupon in catalog}

    def validate(self, code: Optional[str], subtotal: Decimal) -> Coupon:
        """
        Look up a coupon and check it applies to a subtotal.

        Args:
            code: Code as typed by the user; case and surrounding whitespace are ignored
            subtotal: Current subtotal

        Returns:
            The matching coupon

        Raises:
            CouponNotFoundError: If the code is empty or unknown
            MinimumNotMetError: If the subtotal is below the coupon's minimum purchase
        """
        normalized = _normalize(code)
        coupon = self._coupons.get(normalized) if normalized else None
        if coupon is None:
            logger.info(f"Rejected coupon code '{normalized}': not found")
            raise CouponNotFoundError(normalized)

        if coupon.minimum_purchase is not None and Decimal(subtotal) < coupon.minimum_purchase:
            logger.info(
                f"Rejected coupon {coupon.code}: subtotal {subtotal} below minimum {coupon.minimum_purchase}"
            )
            raise MinimumNotMetError(coupon.code, coupon.minimum_purchase)

        return coupon

    def compute_discount(self, coupon: Coupon, subtotal: Decimal) -> Decimal:
        """Discount for a subtotal. Never exceeds the subtotal and never negative."""
        subtotal = max(Decimal(subtotal), Decimal("0"))
        if coupon.kind == CouponKind.PERCENTAGE:
            amount = (subtotal * coupon.discount / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)
        else:
            amount = coupon.discount
        return min(amount, subtotal)

    def __contains__(self, code: str) -> bool:
        return _normalize(code) in self._coupons
