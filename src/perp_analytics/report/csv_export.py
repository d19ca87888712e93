"""CSV export — appends one snapshot row per run for plotting over time."""

from __future__ import annotations

import csv
from decimal import Decimal
from pathlib import Path

from perp_analytics.models.snapshot import AnalyticsSnapshot

# (header, snapshot attribute)
COLUMNS: list[tuple[str, str]] = [
    ("Unix Time", "timestamp"),
    ("Total Pool Value", "total_pool_value"),
    ("Unrealized Paper P&L", "total_unrealized_paper_pnl"),
    ("Unrealized Real P&L", "total_unrealized_real_pnl"),
    ("Total Fees", "total_fees"),
    ("Total Value of Positions", "total_positions_value"),
    ("Total Value of Collateral", "total_collateral_value"),
    ("Average Leverage At Entry", "average_leverage_at_entry"),
    ("Average Effective Leverage", "average_effective_leverage"),
    ("Long Trades", "long_count"),
    ("Long Value", "long_value"),
    ("Short Trades", "short_count"),
    ("Short Value", "short_value"),
    ("Winning Trades", "winning_count"),
    ("Losing Trades", "losing_count"),
    ("Excluded Positions", "excluded_positions"),
]

HEADER = [name for name, _ in COLUMNS]


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def snapshot_row(snapshot: AnalyticsSnapshot) -> list[str]:
    return [_cell(getattr(snapshot, attr)) for _, attr in COLUMNS]


def append_snapshot_csv(path: str | Path, snapshot: AnalyticsSnapshot) -> None:
    """Append *snapshot* to *path*, writing the header if the file is new or empty."""
    p = Path(path)
    write_header = not p.exists() or p.stat().st_size == 0
    with open(p, "a", newline="") as f:
        writer = csv.writer(f)
        if write_header:
            writer.writerow(HEADER)
        writer.writerow(snapshot_row(snapshot))
