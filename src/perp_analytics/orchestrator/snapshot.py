"""Snapshot builder — decodes raw account batches and aggregates them into one snapshot.

Pools and the custodies they list are venue-wide state: any problem with
them is fatal.  Everything else is recovered per position: a malformed
position, or one whose custody is unpriced, unknown or undecodable, is
skipped, counted and logged, and the run completes.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from perp_analytics.decoder.accounts import decode_custody, decode_pool, decode_position
from perp_analytics.errors import DecodeError, EmptyRequiredAccount, InvalidPrice
from perp_analytics.metrics.aggregator import MetricsAccumulator
from perp_analytics.models.accounts import Custody, RawAccount
from perp_analytics.models.quantity import PriceQuantity
from perp_analytics.models.snapshot import AnalyticsSnapshot
from perp_analytics.valuation.fees import FeeEstimator
from perp_analytics.valuation.resolver import build_price_table, pool_value_usd, value_position

log = structlog.get_logger("snapshot")


def _decode_custodies(
    raw_custodies: Sequence[RawAccount],
    required: set[str],
) -> list[Custody]:
    custodies: list[Custody] = []
    for raw in raw_custodies:
        try:
            custodies.append(decode_custody(raw.address, raw.data))
        except DecodeError as exc:
            if raw.address in required:
                raise
            log.warning("custody_skipped", custody=raw.address, error=str(exc))

    missing = sorted(required - {c.address for c in custodies})
    if missing:
        raise EmptyRequiredAccount(
            "Custody", missing[0], f"listed by pool but not fetched ({len(missing)} missing)"
        )
    return custodies


def build_snapshot(
    pools: Sequence[RawAccount],
    custodies: Sequence[RawAccount],
    positions: Sequence[RawAccount],
    *,
    now: int,
    max_price_age_s: int | None = None,
) -> AnalyticsSnapshot:
    """Build the :class:`AnalyticsSnapshot` for one fetch batch.

    Args:
        pools: Raw Pool accounts; at least one is required.
        custodies: Raw Custody accounts.
        positions: Raw Position accounts in fetch order.
        now: Unix time of the snapshot; also the reference for price staleness
            and borrow-fee accrual.
        max_price_age_s: Oracle prices older than this are invalid; None
            disables the check.

    Raises:
        EmptyRequiredAccount: no pool, or a required custody is missing.
        DecodeError: a pool, or a custody a pool lists, is malformed.
    """
    if not pools:
        raise EmptyRequiredAccount("Pool", detail="no pool accounts fetched")

    decoded_pools = [decode_pool(raw.address, raw.data) for raw in pools]
    required = {address for pool in decoded_pools for address in pool.custodies}
    decoded_custodies = _decode_custodies(custodies, required)

    table = build_price_table(decoded_custodies, now, max_price_age_s)
    fees = FeeEstimator.from_accounts(decoded_pools, decoded_custodies, now)

    total_pool_value = PriceQuantity.zero()
    for pool in decoded_pools:
        total_pool_value += pool_value_usd(pool, table)

    acc = MetricsAccumulator()
    position_count = inactive = malformed = unpriced = 0

    for raw in positions:
        try:
            position = decode_position(raw.address, raw.data, raw.sequence)
        except DecodeError as exc:
            malformed += 1
            log.warning(
                "position_skipped",
                position=raw.address,
                sequence=raw.sequence,
                length=len(raw.data),
                error=str(exc),
            )
            continue

        if not position.is_open:
            inactive += 1
            continue

        position_count += 1
        if position.custody not in table.custodies:
            unpriced += 1
            log.warning(
                "position_unresolved",
                position=position.address,
                custody=position.custody,
                reason="custody not fetched or not decodable",
            )
            continue
        try:
            valued = value_position(position, table, fees)
        except InvalidPrice as exc:
            unpriced += 1
            log.warning(
                "position_unpriced",
                position=position.address,
                custody=exc.custody,
                reason=exc.reason,
            )
            continue
        acc.add(valued)

    snapshot = acc.to_snapshot(
        timestamp=now,
        total_pool_value=total_pool_value,
        position_count=position_count,
        inactive_positions=inactive,
        malformed_positions=malformed,
        unpriced_positions=unpriced,
    )
    log.info(
        "snapshot_built",
        pools=len(decoded_pools),
        custodies=len(decoded_custodies),
        positions=position_count,
        inactive=inactive,
        excluded=snapshot.excluded_positions,
    )
    return snapshot
