from decimal import Decimal

from tamkeen_cart.coupons import CouponEngine
from tamkeen_cart.models import AppliedCoupon, CartItem, PackageItem
from tamkeen_cart.pricing import PriceCalculator


def test_quote_without_coupon(shirt, mug):
    calculator = PriceCalculator(CouponEngine())
    lines = [CartItem(product=shirt, quantity=2), CartItem(product=mug)]
    breakdown = calculator.quote(lines)
    assert breakdown.subtotal == Decimal("47.50")
    assert breakdown.discount == Decimal("0")
    assert breakdown.total == Decimal("47.50")
    assert breakdown.coupon_code is None


def test_quote_mixes_products_and_packages(shirt, package):
    lines = [CartItem(product=shirt), PackageItem(package=package, quantity=2)]
    assert PriceCalculator.subtotal(lines) == Decimal("80.00")


def test_total_never_negative(mug):
    engine = CouponEngine()
    calculator = PriceCalculator(engine)
    coupon = engine.validate("FLAT5", Decimal("3"))
    cheap = mug.model_copy(update={"price": Decimal("3.00")})
    breakdown = calculator.quote([CartItem(product=cheap)], AppliedCoupon(coupon=coupon, subtotal=Decimal("3.00")))
    assert breakdown.discount == Decimal("3.00")
    assert breakdown.total == Decimal("0.00")
    assert breakdown.coupon_code == "FLAT5"


def test_empty_lines():
    breakdown = PriceCalculator(CouponEngine()).quote([])
    assert breakdown.subtotal == breakdown.total == Decimal("0")
