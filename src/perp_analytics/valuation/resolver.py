"""Valuation resolver — oracle prices and USD values from one fixed fetch batch.

All custody prices are resolved once into a :class:`PriceTable` before any
position is valued, so every figure in a snapshot uses the same prices.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType

import structlog

from perp_analytics.errors import EmptyRequiredAccount, InvalidPrice
from perp_analytics.models.accounts import Custody, Pool, Position
from perp_analytics.models.quantity import PriceQuantity
from perp_analytics.valuation.fees import FeeEstimator

log = structlog.get_logger("valuation")


def resolve_price(custody: Custody, now: int, max_age_s: int | None = None) -> PriceQuantity:
    """Return the custody's oracle price, or raise :class:`InvalidPrice`.

    A price is invalid when its mantissa is zero or negative, or when
    *max_age_s* is set and the price was published more than that many
    seconds before *now*.
    """
    if custody.oracle_price <= 0:
        raise InvalidPrice(custody.address, f"non-positive price {custody.oracle_price}")
    if max_age_s is not None:
        age = now - custody.oracle_publish_time
        if age > max_age_s:
            raise InvalidPrice(custody.address, f"stale by {age}s (max {max_age_s}s)")
    return custody.price


@dataclass(frozen=True)
class PriceTable:
    """Immutable custody lookup plus the resolved price (or failure) of each."""

    custodies: Mapping[str, Custody]
    prices: Mapping[str, PriceQuantity]
    failures: Mapping[str, InvalidPrice]

    def custody(self, address: str) -> Custody:
        custody = self.custodies.get(address)
        if custody is None:
            raise EmptyRequiredAccount("Custody", address)
        return custody

    def price(self, address: str) -> PriceQuantity:
        self.custody(address)
        failure = self.failures.get(address)
        if failure is not None:
            raise InvalidPrice(failure.custody, failure.reason)
        return self.prices[address]


def build_price_table(
    custodies: Iterable[Custody],
    now: int,
    max_age_s: int | None = None,
) -> PriceTable:
    by_address: dict[str, Custody] = {}
    prices: dict[str, PriceQuantity] = {}
    failures: dict[str, InvalidPrice] = {}
    for custody in custodies:
        by_address[custody.address] = custody
        try:
            prices[custody.address] = resolve_price(custody, now, max_age_s)
        except InvalidPrice as exc:
            failures[custody.address] = exc
            log.warning(
                "custody_price_invalid",
                custody=custody.address,
                mint=custody.mint,
                reason=exc.reason,
            )
    return PriceTable(
        custodies=MappingProxyType(by_address),
        prices=MappingProxyType(prices),
        failures=MappingProxyType(failures),
    )


def current_value_usd(position: Position, custody: Custody, price: PriceQuantity) -> PriceQuantity:
    """Position size at the current oracle price."""
    return custody.token_amount(position.size) * price


def entry_value_usd(position: Position, custody: Custody) -> PriceQuantity:
    """Position size at the entry price recorded on the position."""
    return custody.token_amount(position.size) * position.entry_price


@dataclass(frozen=True)
class ValuedPosition:
    """A position with every USD figure the aggregator needs."""

    position: Position
    mint: str
    size_usd: PriceQuantity
    entry_value_usd: PriceQuantity
    collateral_usd: PriceQuantity
    estimated_exit_fee: Decimal = Decimal(0)
    estimated_borrow_fee: Decimal = Decimal(0)

    @property
    def sequence(self) -> int:
        return self.position.sequence

    @property
    def fees(self) -> PriceQuantity:
        return self.position.accumulated_fees

    @property
    def paper_pnl(self) -> PriceQuantity:
        """Unrealized P&L before fees."""
        if self.position.side == "LONG":
            return self.size_usd - self.entry_value_usd
        return self.entry_value_usd - self.size_usd

    @property
    def real_pnl(self) -> PriceQuantity:
        """Unrealized P&L after accumulated fees."""
        return self.paper_pnl - self.fees


def value_position(
    position: Position,
    table: PriceTable,
    fees: FeeEstimator | None = None,
) -> ValuedPosition:
    """Value *position* against *table*.

    Raises :class:`EmptyRequiredAccount` if the custody is unknown and
    :class:`InvalidPrice` if its price could not be resolved.
    """
    custody = table.custody(position.custody)
    price = table.price(position.custody)
    size_usd = current_value_usd(position, custody, price)
    entry_usd = entry_value_usd(position, custody)

    exit_fee = borrow_fee = Decimal(0)
    if fees is not None:
        exit_fee = fees.exit_fee(position, size_usd)
        borrow_fee = fees.borrow_fee(position, entry_usd)

    return ValuedPosition(
        position=position,
        mint=custody.mint,
        size_usd=size_usd,
        entry_value_usd=entry_usd,
        collateral_usd=position.collateral,
        estimated_exit_fee=exit_fee,
        estimated_borrow_fee=borrow_fee,
    )


def pool_value_usd(pool: Pool, table: PriceTable) -> PriceQuantity:
    """Sum of ``owned * price`` over the pool's custodies.

    Custodies without a valid price are left out and logged.
    """
    total = PriceQuantity.zero()
    for address in pool.custodies:
        custody = table.custody(address)
        try:
            price = table.price(address)
        except InvalidPrice as exc:
            log.warning(
                "custody_excluded_from_pool_value",
                pool=pool.address,
                custody=address,
                reason=exc.reason,
            )
            continue
        total += custody.owned_amount * price
    return total
