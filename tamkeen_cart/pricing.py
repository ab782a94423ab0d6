"""Price aggregation over cart and basket lines."""

from decimal import Decimal
from typing import Iterable, Optional

from .coupons import CouponEngine
from .models import AppliedCoupon, PriceBreakdown


class PriceCalculator:
    """Pure aggregation of subtotal, discount and total. Holds no state of its own."""

    def __init__(self, coupons: CouponEngine) -> None:
        self.coupons = coupons

    @staticmethod
    def subtotal(lines: Iterable) -> Decimal:
        return sum((line.unit_price * line.quantity for line in lines), Decimal("0"))

    def quote(self, lines: Iterable, applied: Optional[AppliedCoupon] = None) -> PriceBreakdown:
        """
        Price a set of lines with an optional applied coupon.

        The coupon is assumed to be valid for the current subtotal; callers
        re-validate it when the subtotal changes.
        """
        subtotal = self.subtotal(lines)
        discount = Decimal("0")
        if applied is not None:
            discount = self.coupons.compute_discount(applied.coupon, subtotal)
        return PriceBreakdown(
            subtotal=subtotal,
            discount=discount,
            total=max(Decimal("0"), subtotal - discount),
            coupon_code=applied.coupon.code if applied else None,
        )
