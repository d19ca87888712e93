"""Console report — human-readable rendering of an AnalyticsSnapshot."""

from __future__ import annotations

from decimal import Decimal

from perp_analytics.models.snapshot import AnalyticsSnapshot, ExtremeTrade

UNDEFINED = "n/a"


def format_usd(value: Decimal) -> str:
    """Whole dollars with thousands separators, e.g. ``$1,234,568``."""
    return f"${value:,.0f}"


def format_ratio(value: Decimal | None) -> str:
    return UNDEFINED if value is None else f"{value:.4f}"


def _trade_line(label: str, trade: ExtremeTrade | None) -> str:
    if trade is None:
        return f"{label}: {UNDEFINED}"
    return (
        f"{label}: {trade.position} Owner: {trade.owner} "
        f"Open P&L: {format_usd(trade.pnl)} Entry Price ${trade.entry_price:.2f} "
        f"Side: {trade.side} Mint {trade.mint}"
    )


def render_snapshot(snapshot: AnalyticsSnapshot) -> str:
    s = snapshot
    lines = [
        f"Unix time: {s.timestamp}",
        f"Total pool value: {format_usd(s.total_pool_value)}",
        f"Total traders unrealized paper P&L: {format_usd(s.total_unrealized_paper_pnl)}",
        f"Total traders fees: {format_usd(s.total_fees)}",
        f"Total traders unrealized real P&L: {format_usd(s.total_unrealized_real_pnl)}",
        f"Total value of positions: {format_usd(s.total_positions_value)}",
        f"Total value of collateral: {format_usd(s.total_collateral_value)}",
        f"Average leverage at entry: {format_ratio(s.average_leverage_at_entry)}",
        f"Average effective leverage: {format_ratio(s.average_effective_leverage)}",
        f"Long trades: {s.long_count} ({format_usd(s.long_value)})",
        f"Short trades: {s.short_count} ({format_usd(s.short_value)})",
        f"L/S ratio: {format_ratio(s.long_short_count_ratio)} "
        f"({format_ratio(s.long_short_value_ratio)})",
        f"Winning trades: {s.winning_count} Losing trades: {s.losing_count}",
        f"Estimated exit fees: {format_usd(s.estimated_exit_fees)} "
        f"Estimated borrow fees: {format_usd(s.estimated_borrow_fees)}",
    ]
    if s.excluded_positions:
        lines.append(
            f"Excluded positions: {s.excluded_positions} "
            f"(malformed {s.malformed_positions}, unpriced {s.unpriced_positions})"
        )
    lines.append(_trade_line("Most profitable open trade", s.most_profitable))
    lines.append(_trade_line("Most unprofitable open trade", s.most_unprofitable))
    return "\n".join(lines)
