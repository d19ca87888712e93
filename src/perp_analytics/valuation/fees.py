"""Close-cost estimates — exit fees and accrued borrow fees per position.

Borrow rates are expressed in bps per hour.  A non-stable custody borrows at
``locked / owned * hourly_funding_bps``; stablecoin custodies share one pooled
utilisation across all stable custodies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

import structlog

from perp_analytics.models.accounts import Custody, Pool, Position
from perp_analytics.models.quantity import PriceQuantity

log = structlog.get_logger("valuation")

BPS = Decimal(10_000)
SECONDS_PER_HOUR = Decimal(3600)


def utilization(locked: PriceQuantity, owned: PriceQuantity) -> Decimal:
    """Fraction of owned assets currently locked; 0 when nothing is owned."""
    ratio = locked.ratio(owned)
    return ratio if ratio is not None else Decimal(0)


def build_borrow_rates(custodies: Iterable[Custody]) -> Mapping[str, Decimal]:
    """Hourly borrow rate (bps) per custody address."""
    custodies = list(custodies)
    stable = [c for c in custodies if c.is_stable]
    stable_locked = sum((c.locked_amount for c in stable), PriceQuantity.zero())
    stable_owned = sum((c.owned_amount for c in stable), PriceQuantity.zero())
    stable_util = utilization(stable_locked, stable_owned)

    rates: dict[str, Decimal] = {}
    for custody in custodies:
        util = stable_util if custody.is_stable else utilization(
            custody.locked_amount, custody.owned_amount
        )
        rates[custody.address] = util * custody.hourly_funding_bps
    return MappingProxyType(rates)


@dataclass(frozen=True)
class FeeEstimator:
    """Estimates what closing a position would cost right now."""

    borrow_rates: Mapping[str, Decimal]
    decrease_position_bps: Mapping[str, int]
    now: int

    @classmethod
    def from_accounts(
        cls,
        pools: Iterable[Pool],
        custodies: Iterable[Custody],
        now: int,
    ) -> FeeEstimator:
        return cls(
            borrow_rates=build_borrow_rates(custodies),
            decrease_position_bps=MappingProxyType(
                {p.address: p.decrease_position_bps for p in pools}
            ),
            now=now,
        )

    def exit_fee(self, position: Position, size_usd: PriceQuantity) -> Decimal:
        """Decrease-position fee on the current size; 0 if the pool is unknown."""
        bps = self.decrease_position_bps.get(position.pool)
        if bps is None:
            log.warning("exit_fee_unavailable", position=position.address, pool=position.pool)
            return Decimal(0)
        return size_usd.to_decimal() * bps / BPS

    def borrow_fee(self, position: Position, entry_value_usd: PriceQuantity) -> Decimal:
        """Borrow fee accrued since the last update; 0 if the collateral custody is unknown."""
        rate = self.borrow_rates.get(position.collateral_custody)
        if rate is None:
            log.warning(
                "borrow_fee_unavailable",
                position=position.address,
                collateral_custody=position.collateral_custody,
            )
            return Decimal(0)
        hours = Decimal(max(self.now - position.update_time, 0)) / SECONDS_PER_HOUR
        return rate * hours * entry_value_usd.to_decimal() / BPS
