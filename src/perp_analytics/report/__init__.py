"""Report sinks — console text and CSV rows."""

from perp_analytics.report.console import render_snapshot
from perp_analytics.report.csv_export import append_snapshot_csv

__all__ = ["append_snapshot_csv", "render_snapshot"]
