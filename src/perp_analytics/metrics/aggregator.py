"""Metrics aggregator — a single forward pass over valued positions.

Every running total is an exact :class:`PriceQuantity` sum, so partial
accumulators built over disjoint shards can be merged in any order.  The
most/least profitable trade is the only order-sensitive figure: ties on paper
P&L go to the position with the lower fetch sequence index, which keeps the
choice stable however the shards were split or merged.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from decimal import Decimal

from perp_analytics.metrics.formulas import average, count_ratio, leverage, value_ratio
from perp_analytics.models.quantity import PriceQuantity
from perp_analytics.models.snapshot import AnalyticsSnapshot, ExtremeTrade
from perp_analytics.valuation.resolver import ValuedPosition


def _zero() -> PriceQuantity:
    return PriceQuantity.zero()


def _beats(candidate: ValuedPosition, current: ValuedPosition | None, direction: int) -> bool:
    """True if *candidate* should replace *current* as the max (1) or min (-1)."""
    if current is None:
        return True
    cmp = (candidate.paper_pnl > current.paper_pnl) - (candidate.paper_pnl < current.paper_pnl)
    if cmp == 0:
        return candidate.sequence < current.sequence
    return cmp == direction


def _extreme(vp: ValuedPosition | None) -> ExtremeTrade | None:
    if vp is None:
        return None
    return ExtremeTrade(
        position=vp.position.address,
        owner=vp.position.owner,
        pnl=vp.paper_pnl.to_decimal(),
        entry_price=vp.position.entry_price.to_decimal(),
        side=vp.position.side,
        mint=vp.mint,
        sequence=vp.sequence,
    )


@dataclass
class MetricsAccumulator:
    """Running state of the aggregation pass."""

    total_positions_value: PriceQuantity = field(default_factory=_zero)
    total_collateral_value: PriceQuantity = field(default_factory=_zero)
    total_fees: PriceQuantity = field(default_factory=_zero)
    total_paper_pnl: PriceQuantity = field(default_factory=_zero)
    total_real_pnl: PriceQuantity = field(default_factory=_zero)
    long_count: int = 0
    short_count: int = 0
    long_value: PriceQuantity = field(default_factory=_zero)
    short_value: PriceQuantity = field(default_factory=_zero)
    winning_count: int = 0
    losing_count: int = 0
    leverage_at_entry_sum: Decimal = Decimal(0)
    effective_leverage_sum: Decimal = Decimal(0)
    leverage_samples: int = 0
    estimated_exit_fees: Decimal = Decimal(0)
    estimated_borrow_fees: Decimal = Decimal(0)
    most_profitable: ValuedPosition | None = None
    most_unprofitable: ValuedPosition | None = None

    def add(self, vp: ValuedPosition) -> None:
        paper = vp.paper_pnl
        real = paper - vp.fees

        self.total_positions_value += vp.size_usd
        self.total_collateral_value += vp.collateral_usd
        self.total_fees += vp.fees
        self.total_paper_pnl += paper
        self.total_real_pnl += real

        if vp.position.side == "LONG":
            self.long_count += 1
            self.long_value += vp.size_usd
        else:
            self.short_count += 1
            self.short_value += vp.size_usd

        # Zero real P&L counts as a loss.
        if real.sign() > 0:
            self.winning_count += 1
        else:
            self.losing_count += 1

        at_entry = leverage(vp.entry_value_usd, vp.collateral_usd)
        effective = leverage(vp.size_usd, vp.collateral_usd)
        if at_entry is not None and effective is not None:
            self.leverage_at_entry_sum += at_entry
            self.effective_leverage_sum += effective
            self.leverage_samples += 1

        self.estimated_exit_fees += vp.estimated_exit_fee
        self.estimated_borrow_fees += vp.estimated_borrow_fee

        if _beats(vp, self.most_profitable, 1):
            self.most_profitable = vp
        if _beats(vp, self.most_unprofitable, -1):
            self.most_unprofitable = vp

    def merge(self, other: MetricsAccumulator) -> MetricsAccumulator:
        """Combine two partial accumulators into a new one."""
        merged = replace(
            self,
            total_positions_value=self.total_positions_value + other.total_positions_value,
            total_collateral_value=self.total_collateral_value + other.total_collateral_value,
            total_fees=self.total_fees + other.total_fees,
            total_paper_pnl=self.total_paper_pnl + other.total_paper_pnl,
            total_real_pnl=self.total_real_pnl + other.total_real_pnl,
            long_count=self.long_count + other.long_count,
            short_count=self.short_count + other.short_count,
            long_value=self.long_value + other.long_value,
            short_value=self.short_value + other.short_value,
            winning_count=self.winning_count + other.winning_count,
            losing_count=self.losing_count + other.losing_count,
            leverage_at_entry_sum=self.leverage_at_entry_sum + other.leverage_at_entry_sum,
            effective_leverage_sum=self.effective_leverage_sum + other.effective_leverage_sum,
            leverage_samples=self.leverage_samples + other.leverage_samples,
            estimated_exit_fees=self.estimated_exit_fees + other.estimated_exit_fees,
            estimated_borrow_fees=self.estimated_borrow_fees + other.estimated_borrow_fees,
        )
        if other.most_profitable is not None and _beats(
            other.most_profitable, merged.most_profitable, 1
        ):
            merged.most_profitable = other.most_profitable
        if other.most_unprofitable is not None and _beats(
            other.most_unprofitable, merged.most_unprofitable, -1
        ):
            merged.most_unprofitable = other.most_unprofitable
        return merged

    def to_snapshot(
        self,
        *,
        timestamp: int,
        total_pool_value: PriceQuantity | None = None,
        position_count: int | None = None,
        inactive_positions: int = 0,
        malformed_positions: int = 0,
        unpriced_positions: int = 0,
    ) -> AnalyticsSnapshot:
        valued = self.long_count + self.short_count
        pool_value = total_pool_value if total_pool_value is not None else _zero()
        return AnalyticsSnapshot(
            timestamp=timestamp,
            total_pool_value=pool_value.to_decimal(),
            total_positions_value=self.total_positions_value.to_decimal(),
            total_collateral_value=self.total_collateral_value.to_decimal(),
            total_fees=self.total_fees.to_decimal(),
            total_unrealized_paper_pnl=self.total_paper_pnl.to_decimal(),
            total_unrealized_real_pnl=self.total_real_pnl.to_decimal(),
            average_leverage_at_entry=average(self.leverage_at_entry_sum, self.leverage_samples),
            average_effective_leverage=average(self.effective_leverage_sum, self.leverage_samples),
            long_count=self.long_count,
            short_count=self.short_count,
            long_value=self.long_value.to_decimal(),
            short_value=self.short_value.to_decimal(),
            long_short_value_ratio=value_ratio(self.long_value, self.short_value),
            long_short_count_ratio=count_ratio(self.long_count, self.short_count),
            winning_count=self.winning_count,
            losing_count=self.losing_count,
            most_profitable=_extreme(self.most_profitable),
            most_unprofitable=_extreme(self.most_unprofitable),
            position_count=position_count if position_count is not None else valued,
            inactive_positions=inactive_positions,
            malformed_positions=malformed_positions,
            unpriced_positions=unpriced_positions,
            estimated_exit_fees=self.estimated_exit_fees,
            estimated_borrow_fees=self.estimated_borrow_fees,
        )


def aggregate(
    positions: Iterable[ValuedPosition],
    *,
    timestamp: int,
    total_pool_value: PriceQuantity | None = None,
    **counts: int,
) -> AnalyticsSnapshot:
    """Fold *positions* (in fetch order) into an :class:`AnalyticsSnapshot`."""
    acc = MetricsAccumulator()
    for vp in positions:
        acc.add(vp)
    return acc.to_snapshot(timestamp=timestamp, total_pool_value=total_pool_value, **counts)
