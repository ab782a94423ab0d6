"""Tests for coupon validation and discounts."""

from decimal import Decimal

import pytest

from tamkeen_cart.coupons import CouponEngine
from tamkeen_cart.exceptions import CouponNotFoundError, MinimumNotMetError
from tamkeen_cart.models import Coupon, CouponKind


@pytest.fixture
def engine():
    return CouponEngine()


class TestValidate:
    def test_save10_above_minimum(self, engine):
        coupon = engine.validate("SAVE10", Decimal("60"))
        assert coupon.code == "SAVE10"
        assert engine.compute_discount(coupon, Decimal("60")) == Decimal("6.00")

    def test_save10_below_minimum(self, engine):
        with pytest.raises(MinimumNotMetError) as exc_info:
            engine.validate("SAVE10", Decimal("40"))
        assert exc_info.value.required == Decimal("50")
        assert "$50.00" in exc_info.value.message

    def test_minimum_is_inclusive(self, engine):
        assert engine.validate("SAVE10", Decimal("50")).code == "SAVE10"

    def test_code_is_case_insensitive_and_trimmed(self, engine):
        assert engine.validate("  save10 ", Decimal("60")).code == "SAVE10"

    @pytest.mark.parametrize("code", ["", "   ", None, "BOGUS"])
    def test_unknown_or_empty_code(self, engine, code):
        with pytest.raises(CouponNotFoundError):
            engine.validate(code, Decimal("100"))

    def test_custom_catalog(self):
        engine = CouponEngine([Coupon(code="Welcome", discount=Decimal("25"), kind=CouponKind.PERCENTAGE)])
        assert "WELCOME" in engine
        assert "SAVE10" not in engine


class TestComputeDiscount:
    def test_fixed_discount_capped_at_subtotal(self, engine):
        coupon = engine.validate("FLAT5", Decimal("3.00"))
        assert engine.compute_discount(coupon, Decimal("3.00")) == Decimal("3.00")

    def test_fixed_discount_below_subtotal(self, engine):
        coupon = engine.validate("FLAT5", Decimal("12.00"))
        assert engine.compute_discount(coupon, Decimal("12.00")) == Decimal("5")

    def test_percentage_rounds_to_cents(self, engine):
        coupon = engine.validate("SAVE10", Decimal("55.55"))
        assert engine.compute_discount(coupon, Decimal("55.55")) == Decimal("5.56")

    def test_repeat_calls_are_stable(self, engine):
        coupon = engine.validate("SAVE20", Decimal("150"))
        results = {engine.compute_discount(coupon, Decimal("150")) for _ in range(3)}
        assert results == {Decimal("30.00")}
