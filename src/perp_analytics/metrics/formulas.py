"""Pure metric helpers — ratios and averages that report ``None`` when undefined."""

from __future__ import annotations

from decimal import Decimal

from perp_analytics.models.quantity import PriceQuantity


def value_ratio(numerator: PriceQuantity, denominator: PriceQuantity) -> Decimal | None:
    """numerator / denominator, or None when the denominator is zero."""
    return numerator.ratio(denominator)


def count_ratio(numerator: int, denominator: int) -> Decimal | None:
    if denominator == 0:
        return None
    return Decimal(numerator) / Decimal(denominator)


def average(total: Decimal, count: int) -> Decimal | None:
    """Mean of *count* samples summing to *total*; None for no samples."""
    if count <= 0:
        return None
    return total / count


def leverage(notional: PriceQuantity, collateral: PriceQuantity) -> Decimal | None:
    """Notional / collateral.  Undefined for zero collateral."""
    return notional.ratio(collateral)
