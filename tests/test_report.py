"""Tests for the console and CSV report sinks."""

from __future__ import annotations

import csv
from decimal import Decimal

from perp_analytics.models import AnalyticsSnapshot
from perp_analytics.report import append_snapshot_csv, render_snapshot
from perp_analytics.report.console import format_ratio, format_usd
from perp_analytics.report.csv_export import HEADER, snapshot_row
from tests.builders import NOW, SHORT_OWNER


class TestFormatting:
    def test_usd_rounds_to_whole_dollars(self):
        assert format_usd(Decimal("1766787.4")) == "$1,766,787"
        assert format_usd(Decimal("0")) == "$0"

    def test_ratio(self):
        assert format_ratio(Decimal("5612.525")) == "5612.5250"
        assert format_ratio(None) == "n/a"


class TestConsoleReport:
    def test_scenario_lines(self, scenario_snapshot):
        lines = render_snapshot(scenario_snapshot).splitlines()
        assert lines[0] == f"Unix time: {NOW}"
        assert "Total pool value: $1,766,787" in lines
        assert "Total traders unrealized paper P&L: $13,980" in lines
        assert "Total traders fees: $15" in lines
        assert "Total traders unrealized real P&L: $13,965" in lines
        assert "Total value of positions: $1,143,345" in lines
        assert "Total value of collateral: $300" in lines
        assert "Average leverage at entry: 5612.5250" in lines
        assert "Long trades: 1 ($54,910)" in lines
        assert "Short trades: 1 ($1,088,435)" in lines
        assert "Winning trades: 2 Losing trades: 0" in lines

    def test_most_profitable_line(self, scenario_snapshot):
        text = render_snapshot(scenario_snapshot)
        line = next(l for l in text.splitlines() if l.startswith("Most profitable"))
        assert SHORT_OWNER in line
        assert "Open P&L: $9,070" in line
        assert "Entry Price $2195.01" in line
        assert "Side: SHORT" in line

    def test_empty_snapshot_shows_undefined(self):
        text = render_snapshot(AnalyticsSnapshot(timestamp=NOW))
        assert "Average effective leverage: n/a" in text
        assert "L/S ratio: n/a (n/a)" in text
        assert "Most profitable open trade: n/a" in text
        assert "Excluded positions" not in text

    def test_excluded_positions_line(self):
        snap = AnalyticsSnapshot(timestamp=NOW, malformed_positions=2, unpriced_positions=1)
        assert "Excluded positions: 3 (malformed 2, unpriced 1)" in render_snapshot(snap)


class TestCsvExport:
    def test_row_matches_header(self, scenario_snapshot):
        row = snapshot_row(scenario_snapshot)
        assert len(row) == len(HEADER)
        by_name = dict(zip(HEADER, row))
        assert by_name["Unix Time"] == str(NOW)
        assert Decimal(by_name["Total Pool Value"]) == Decimal("1766787")
        assert Decimal(by_name["Unrealized Paper P&L"]) == Decimal("13980")
        assert by_name["Long Trades"] == "1"

    def test_undefined_values_are_blank(self):
        row = dict(zip(HEADER, snapshot_row(AnalyticsSnapshot(timestamp=NOW))))
        assert row["Average Effective Leverage"] == ""

    def test_header_written_once(self, tmp_path, scenario_snapshot):
        path = tmp_path / "snapshots.csv"
        append_snapshot_csv(path, scenario_snapshot)
        append_snapshot_csv(path, scenario_snapshot)

        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == HEADER
        assert len(rows) == 3
        assert rows[1] == rows[2]

    def test_header_written_to_empty_file(self, tmp_path, scenario_snapshot):
        path = tmp_path / "snapshots.csv"
        path.write_text("")
        append_snapshot_csv(path, scenario_snapshot)
        with open(path, newline="") as f:
            assert next(csv.reader(f)) == HEADER
