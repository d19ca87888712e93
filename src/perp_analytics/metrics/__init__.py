"""Venue metrics — pure formulas and the single-pass aggregator."""

from perp_analytics.metrics.aggregator import MetricsAccumulator, aggregate
from perp_analytics.metrics.formulas import average, count_ratio, leverage, value_ratio

__all__ = [
    "MetricsAccumulator",
    "aggregate",
    "average",
    "count_ratio",
    "leverage",
    "value_ratio",
]
