"""Domain models — fixed-point values, venue accounts and the snapshot."""

from perp_analytics.models.accounts import (
    USD_DECIMALS,
    AccountKind,
    Custody,
    Pool,
    Position,
    RawAccount,
    Side,
)
from perp_analytics.models.quantity import PriceQuantity
from perp_analytics.models.snapshot import AnalyticsSnapshot, ExtremeTrade

__all__ = [
    "USD_DECIMALS",
    "AccountKind",
    "AnalyticsSnapshot",
    "Custody",
    "ExtremeTrade",
    "Pool",
    "Position",
    "PriceQuantity",
    "RawAccount",
    "Side",
]
