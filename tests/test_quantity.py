"""Tests for PriceQuantity fixed-point arithmetic."""

from __future__ import annotations

from decimal import Decimal

import pytest

from perp_analytics.models.quantity import PriceQuantity


class TestRescale:
    def test_finer_exponent_multiplies_mantissa(self):
        q = PriceQuantity(5491, -2).rescale(-8)
        assert q.mantissa == 5_491_000_000
        assert q.exponent == -8

    def test_same_exponent_is_identity(self):
        assert PriceQuantity(7, -3).rescale(-3) == PriceQuantity(7, -3)

    def test_coarser_exponent_rejected(self):
        with pytest.raises(ValueError):
            PriceQuantity(12345, -6).rescale(-2)

    def test_large_rescale_does_not_overflow(self):
        q = PriceQuantity(2**63 - 1, 0).rescale(-30)
        assert q.mantissa == (2**63 - 1) * 10**30


class TestArithmetic:
    def test_add_aligns_to_finer_exponent(self):
        total = PriceQuantity(5, -1) + PriceQuantity(3, -4)
        assert total.exponent == -4
        assert total.mantissa == 5003

    def test_sub_can_go_negative(self):
        diff = PriceQuantity(50, 0) - PriceQuantity(5491, -2)
        assert diff.to_decimal() == Decimal("-4.91")

    def test_mul_sums_exponents(self):
        product = PriceQuantity(1000 * 10**9, -9) * PriceQuantity(5_491_000_000, -8)
        assert product.exponent == -17
        assert product.to_decimal() == Decimal("54910")

    def test_neg(self):
        assert -PriceQuantity(3, -2) == PriceQuantity(-3, -2)

    def test_sum_with_zero_start(self):
        values = [PriceQuantity(1, -6), PriceQuantity(2, -2), PriceQuantity(3, 0)]
        assert sum(values, PriceQuantity.zero()).to_decimal() == Decimal("3.020001")


class TestComparison:
    def test_equal_across_scales(self):
        assert PriceQuantity(5, 0) == PriceQuantity(50_000, -4)

    def test_hash_consistent_with_equality(self):
        assert hash(PriceQuantity(5, 0)) == hash(PriceQuantity(50_000, -4))
        assert hash(PriceQuantity(0, -3)) == hash(PriceQuantity(0, 2))

    def test_ordering(self):
        assert PriceQuantity(4910, 0) > PriceQuantity(4_909_999_999, -6)
        assert PriceQuantity(-1, -8) < PriceQuantity(0, 0)
        assert PriceQuantity(1, 0) >= PriceQuantity(100, -2)
        assert PriceQuantity(1, 0) <= PriceQuantity(100, -2)

    def test_sign(self):
        assert PriceQuantity(-7, 3).sign() == -1
        assert PriceQuantity(0, -3).sign() == 0
        assert PriceQuantity(7, -3).sign() == 1


class TestConversion:
    def test_to_decimal_is_exact_beyond_context_precision(self):
        mantissa = 10**40 + 1
        assert PriceQuantity(mantissa, -6).to_decimal() == Decimal(f"{mantissa}E-6")
        assert str(PriceQuantity(mantissa, -6).to_decimal()).endswith("000001")

    def test_negative_to_decimal(self):
        assert PriceQuantity(-123, -2).to_decimal() == Decimal("-1.23")

    def test_ratio(self):
        assert PriceQuantity(50_000, 0).ratio(PriceQuantity(200_000_000, -6)) == Decimal(250)

    def test_ratio_zero_denominator_is_none(self):
        assert PriceQuantity(1, 0).ratio(PriceQuantity(0, -6)) is None
