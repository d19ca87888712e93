"""Tests for building a snapshot from raw account batches."""

from __future__ import annotations

from decimal import Decimal

import pytest

from perp_analytics.errors import DecodeError, EmptyRequiredAccount, TruncatedBuffer
from perp_analytics.models import RawAccount
from perp_analytics.orchestrator import build_snapshot
from tests.builders import (
    ETH_CUSTODY,
    NOW,
    SHORT_OWNER,
    addr,
    build_custody,
    build_eth_custody,
    build_pool,
    build_position,
    build_short_position,
    build_usdc_custody,
    raw_account,
    scenario_custodies,
)


def _pools():
    return [raw_account(build_pool())]


def _custodies(*custodies):
    return [raw_account(c) for c in (custodies or scenario_custodies())]


def _positions():
    return [raw_account(build_position()), raw_account(build_short_position())]


class TestScenario:
    def test_from_raw_bytes(self):
        snap = build_snapshot(_pools(), _custodies(), _positions(), now=NOW, max_price_age_s=300)
        assert snap.timestamp == NOW
        assert snap.total_pool_value == Decimal("1766787")
        assert snap.total_positions_value == Decimal("1143345")
        assert snap.total_unrealized_paper_pnl == Decimal("13980")
        assert snap.total_unrealized_real_pnl == Decimal("13965")
        assert snap.position_count == 2
        assert snap.excluded_positions == 0
        assert snap.most_profitable.owner == SHORT_OWNER
        assert snap.estimated_exit_fees > 0
        assert snap.estimated_borrow_fees == Decimal("229.501")

    def test_no_positions(self):
        snap = build_snapshot(_pools(), _custodies(), [], now=NOW)
        assert snap.position_count == 0
        assert snap.total_pool_value == Decimal("1766787")
        assert snap.average_effective_leverage is None


class TestPositionRecovery:
    def test_truncated_position_is_excluded(self):
        truncated = RawAccount(address=addr(202), data=raw_account(build_position()).data[:-1], sequence=2)
        snap = build_snapshot(_pools(), _custodies(), _positions() + [truncated], now=NOW)
        assert snap.malformed_positions == 1
        assert snap.excluded_positions == 1
        assert snap.position_count == 2
        assert snap.total_unrealized_paper_pnl == Decimal("13980")

    def test_unpriced_position_is_counted_not_valued(self):
        custodies = _custodies(build_custody(), build_eth_custody(oracle_price=0), build_usdc_custody())
        snap = build_snapshot(_pools(), custodies, _positions(), now=NOW)
        assert snap.position_count == 2
        assert snap.unpriced_positions == 1
        assert snap.short_count == 0
        assert snap.total_positions_value == Decimal("54910")
        assert snap.total_pool_value == Decimal("1549100")

    def test_stale_price_makes_position_unpriced(self):
        custodies = _custodies(
            build_custody(), build_eth_custody(oracle_publish_time=NOW - 3600), build_usdc_custody()
        )
        snap = build_snapshot(_pools(), custodies, _positions(), now=NOW, max_price_age_s=300)
        assert snap.unpriced_positions == 1

    def test_closed_position_is_inactive(self):
        closed = build_position(address=addr(203), sequence=2, size=0, collateral_usd=0)
        snap = build_snapshot(_pools(), _custodies(), _positions() + [raw_account(closed)], now=NOW)
        assert snap.inactive_positions == 1
        assert snap.position_count == 2
        assert snap.excluded_positions == 0


class TestFatalFailures:
    def test_no_pool(self):
        with pytest.raises(EmptyRequiredAccount) as exc_info:
            build_snapshot([], _custodies(), _positions(), now=NOW)
        assert exc_info.value.kind == "Pool"

    def test_malformed_pool(self):
        pool = RawAccount(address=addr(1), data=raw_account(build_pool()).data[:40])
        with pytest.raises(TruncatedBuffer):
            build_snapshot([pool], _custodies(), _positions(), now=NOW)

    def test_malformed_required_custody(self):
        custodies = _custodies()
        custodies[1] = RawAccount(address=ETH_CUSTODY, data=custodies[1].data[:100])
        with pytest.raises(DecodeError):
            build_snapshot(_pools(), custodies, _positions(), now=NOW)

    def test_unreferenced_malformed_custody_is_skipped(self):
        stray = RawAccount(address=addr(50), data=raw_account(build_custody()).data[:100])
        snap = build_snapshot(_pools(), _custodies() + [stray], _positions(), now=NOW)
        assert snap.position_count == 2

    def test_missing_custody(self):
        custodies = _custodies(build_custody(), build_usdc_custody())
        with pytest.raises(EmptyRequiredAccount) as exc_info:
            build_snapshot(_pools(), custodies, _positions(), now=NOW)
        assert exc_info.value.address == ETH_CUSTODY


class TestPositionReferences:
    def test_position_on_unknown_custody_is_excluded(self):
        orphan = build_position(address=addr(204), sequence=2, custody=addr(999))
        snap = build_snapshot(_pools(), _custodies(), _positions() + [raw_account(orphan)], now=NOW)
        assert snap.position_count == 3
        assert snap.unpriced_positions == 1
        assert snap.total_unrealized_paper_pnl == Decimal("13980")

    def test_unknown_collateral_custody_only_drops_borrow_estimate(self):
        stranger = build_position(address=addr(206), sequence=2, collateral_custody=addr(777))
        snap = build_snapshot(
            _pools(), _custodies(), _positions() + [raw_account(stranger)], now=NOW
        )
        assert snap.position_count == 3
        assert snap.excluded_positions == 0
        assert snap.long_count == 2
        # The stranger's borrow estimate is zero; the scenario's two remain.
        assert snap.estimated_borrow_fees == Decimal("229.501")

    def test_position_on_undecodable_unlisted_custody_is_excluded(self):
        stray = build_custody(address=addr(50))
        broken = RawAccount(address=stray.address, data=raw_account(stray).data[:100])
        on_stray = build_position(address=addr(207), sequence=2, custody=stray.address)
        snap = build_snapshot(
            _pools(), _custodies() + [broken], _positions() + [raw_account(on_stray)], now=NOW
        )
        assert snap.position_count == 3
        assert snap.unpriced_positions == 1
        assert snap.total_unrealized_real_pnl == Decimal("13965")
