"""Typed venue accounts — Pool, Custody and Position as decoded from the ledger."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict

from perp_analytics.models.quantity import PriceQuantity

# USD amounts (entry price, collateral, fees, AUM) carry 6 decimals on-chain.
USD_DECIMALS = 6

AccountKind = Literal["Pool", "Custody", "Position"]
Side = Literal["LONG", "SHORT"]


@dataclass(frozen=True)
class RawAccount:
    """One fetched account: base58 address, raw bytes and fetch-order index."""

    address: str
    data: bytes
    sequence: int = 0


def usd(raw: int) -> PriceQuantity:
    return PriceQuantity(raw, -USD_DECIMALS)


class Pool(BaseModel):
    """Aggregate venue state: fee schedule and the ordered custody list."""

    model_config = ConfigDict(frozen=True)

    address: str
    name: str
    aum_usd: int
    increase_position_bps: int
    decrease_position_bps: int
    inception_time: int
    bump: int
    custodies: tuple[str, ...] = ()

    @property
    def aum(self) -> PriceQuantity:
        return usd(self.aum_usd)


class Custody(BaseModel):
    """A pool's vault for one asset, with its embedded oracle price."""

    model_config = ConfigDict(frozen=True)

    address: str
    pool: str
    mint: str
    token_account: str
    decimals: int
    is_stable: bool
    oracle_account: str
    oracle_price: int
    oracle_expo: int
    oracle_publish_time: int
    fees_reserves: int
    owned: int
    locked: int
    guaranteed_usd: int
    global_short_sizes: int
    global_short_average_prices: int
    hourly_funding_bps: int
    cumulative_interest_rate: int
    bump: int

    @property
    def price(self) -> PriceQuantity:
        """Raw oracle price; validity is checked by the valuation resolver."""
        return PriceQuantity(self.oracle_price, self.oracle_expo)

    def token_amount(self, raw: int) -> PriceQuantity:
        """Scale a base-unit token amount by this custody's decimals."""
        return PriceQuantity(raw, -self.decimals)

    @property
    def owned_amount(self) -> PriceQuantity:
        return self.token_amount(self.owned)

    @property
    def locked_amount(self) -> PriceQuantity:
        return self.token_amount(self.locked)


class Position(BaseModel):
    """One trader's open (or closed-but-not-reclaimed) exposure."""

    model_config = ConfigDict(frozen=True)

    address: str
    sequence: int = 0
    owner: str
    pool: str
    custody: str
    collateral_custody: str
    open_time: int
    update_time: int
    side: Side
    price: int
    size: int
    collateral_usd: int
    accumulated_fees_usd: int
    realised_pnl_usd: int
    cumulative_interest_snapshot: int
    locked_amount: int
    bump: int

    @property
    def is_open(self) -> bool:
        return self.size > 0

    @property
    def entry_price(self) -> PriceQuantity:
        return usd(self.price)

    @property
    def collateral(self) -> PriceQuantity:
        return usd(self.collateral_usd)

    @property
    def accumulated_fees(self) -> PriceQuantity:
        return usd(self.accumulated_fees_usd)

    @property
    def realised_pnl(self) -> PriceQuantity:
        return usd(self.realised_pnl_usd)
