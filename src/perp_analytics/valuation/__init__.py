"""Valuation — oracle price resolution, USD values and fee estimates."""

from perp_analytics.valuation.fees import FeeEstimator, build_borrow_rates
from perp_analytics.valuation.resolver import (
    PriceTable,
    ValuedPosition,
    build_price_table,
    current_value_usd,
    entry_value_usd,
    pool_value_usd,
    resolve_price,
    value_position,
)

__all__ = [
    "FeeEstimator",
    "PriceTable",
    "ValuedPosition",
    "build_borrow_rates",
    "build_price_table",
    "current_value_usd",
    "entry_value_usd",
    "pool_value_usd",
    "resolve_price",
    "value_position",
]
