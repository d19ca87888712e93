"""AnalyticsSnapshot — the immutable result of one analytics run."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from perp_analytics.models.accounts import Side

ZERO = Decimal("0")


class ExtremeTrade(BaseModel):
    """The most (un)profitable open position seen in a run."""

    model_config = ConfigDict(frozen=True)

    position: str
    owner: str
    pnl: Decimal
    entry_price: Decimal
    side: Side
    mint: str
    sequence: int


class AnalyticsSnapshot(BaseModel):
    """Venue-wide metrics computed against a single fetch batch.

    Averages and ratios are ``None`` when undefined (no positions, or a zero
    denominator).  USD figures are exact Decimals.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int
    total_pool_value: Decimal = ZERO
    total_positions_value: Decimal = ZERO
    total_collateral_value: Decimal = ZERO
    total_fees: Decimal = ZERO
    total_unrealized_paper_pnl: Decimal = ZERO
    total_unrealized_real_pnl: Decimal = ZERO
    average_leverage_at_entry: Decimal | None = None
    average_effective_leverage: Decimal | None = None
    long_count: int = 0
    short_count: int = 0
    long_value: Decimal = ZERO
    short_value: Decimal = ZERO
    long_short_value_ratio: Decimal | None = None
    long_short_count_ratio: Decimal | None = None
    winning_count: int = 0
    losing_count: int = 0
    most_profitable: ExtremeTrade | None = None
    most_unprofitable: ExtremeTrade | None = None
    # Bookkeeping for positions that did not reach the aggregates.
    position_count: int = 0
    inactive_positions: int = 0
    malformed_positions: int = 0
    unpriced_positions: int = 0
    # Close-cost estimates; not part of total_fees or real P&L.
    estimated_exit_fees: Decimal = ZERO
    estimated_borrow_fees: Decimal = ZERO

    @property
    def excluded_positions(self) -> int:
        """Positions left out of valuation aggregates (malformed + unpriced)."""
        return self.malformed_positions + self.unpriced_positions

    @property
    def valued_positions(self) -> int:
        return self.long_count + self.short_count
