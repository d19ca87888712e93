"""Account builders and the two-position reference scenario.

Scenario (USD):
    LONG  1000 SOL, entry 50.00,    mark 54.91,   collateral 200, fees 10
    SHORT  500 ETH, entry 2195.01,  mark 2176.87, collateral 100, fees 5
"""

from __future__ import annotations

from perp_analytics.decoder.layout import pack_custody, pack_pool, pack_position, pubkey_to_str
from perp_analytics.models import Custody, Pool, Position, RawAccount

NOW = 1_700_000_000


def addr(n: int) -> str:
    """Deterministic base58 address for small integers."""
    return pubkey_to_str(n.to_bytes(32, "big"))


POOL_ADDR = addr(1)
SOL_CUSTODY = addr(10)
ETH_CUSTODY = addr(11)
USDC_CUSTODY = addr(12)
SOL_MINT = addr(20)
ETH_MINT = addr(21)
USDC_MINT = addr(22)
LONG_OWNER = addr(100)
SHORT_OWNER = addr(101)


def build_custody(**overrides) -> Custody:
    fields = dict(
        address=SOL_CUSTODY,
        pool=POOL_ADDR,
        mint=SOL_MINT,
        token_account=addr(30),
        decimals=9,
        is_stable=False,
        oracle_account=addr(40),
        oracle_price=5_491_000_000,  # 54.91
        oracle_expo=-8,
        oracle_publish_time=NOW,
        fees_reserves=0,
        owned=10_000 * 10**9,
        locked=2_000 * 10**9,
        guaranteed_usd=0,
        global_short_sizes=0,
        global_short_average_prices=0,
        hourly_funding_bps=10,
        cumulative_interest_rate=0,
        bump=254,
    )
    fields.update(overrides)
    return Custody(**fields)


def build_eth_custody(**overrides) -> Custody:
    fields = dict(
        address=ETH_CUSTODY,
        mint=ETH_MINT,
        token_account=addr(31),
        decimals=8,
        oracle_account=addr(41),
        oracle_price=217_687_000_000,  # 2176.87
        owned=100 * 10**8,
        locked=0,
    )
    fields.update(overrides)
    return build_custody(**fields)


def build_usdc_custody(**overrides) -> Custody:
    fields = dict(
        address=USDC_CUSTODY,
        mint=USDC_MINT,
        token_account=addr(32),
        decimals=6,
        is_stable=True,
        oracle_account=addr(42),
        oracle_price=100_000_000,  # 1.00
        owned=1_000_000 * 10**6,
        locked=500_000 * 10**6,
        hourly_funding_bps=4,
    )
    fields.update(overrides)
    return build_custody(**fields)


def build_pool(**overrides) -> Pool:
    fields = dict(
        address=POOL_ADDR,
        name="Main Pool",
        aum_usd=1_766_787 * 10**6,
        increase_position_bps=6,
        decrease_position_bps=10,
        inception_time=NOW - 86_400 * 365,
        bump=253,
        custodies=(SOL_CUSTODY, ETH_CUSTODY, USDC_CUSTODY),
    )
    fields.update(overrides)
    return Pool(**fields)


def build_position(**overrides) -> Position:
    """The scenario's LONG position unless overridden."""
    fields = dict(
        address=addr(200),
        sequence=0,
        owner=LONG_OWNER,
        pool=POOL_ADDR,
        custody=SOL_CUSTODY,
        collateral_custody=SOL_CUSTODY,
        open_time=NOW - 7200,
        update_time=NOW - 3600,
        side="LONG",
        price=50_000_000,  # 50.00
        size=1_000 * 10**9,
        collateral_usd=200 * 10**6,
        accumulated_fees_usd=10 * 10**6,
        realised_pnl_usd=0,
        cumulative_interest_snapshot=0,
        locked_amount=0,
        bump=252,
    )
    fields.update(overrides)
    return Position(**fields)


def build_short_position(**overrides) -> Position:
    fields = dict(
        address=addr(201),
        sequence=1,
        owner=SHORT_OWNER,
        custody=ETH_CUSTODY,
        collateral_custody=USDC_CUSTODY,
        side="SHORT",
        price=2_195_010_000,  # 2195.01
        size=500 * 10**8,
        collateral_usd=100 * 10**6,
        accumulated_fees_usd=5 * 10**6,
    )
    fields.update(overrides)
    return build_position(**fields)


def scenario_custodies() -> list[Custody]:
    return [build_custody(), build_eth_custody(), build_usdc_custody()]


def raw_account(model: Pool | Custody | Position, sequence: int | None = None) -> RawAccount:
    """Pack *model*; positions default to their own sequence index."""
    if isinstance(model, Pool):
        data = pack_pool(model)
    elif isinstance(model, Custody):
        data = pack_custody(model)
    else:
        data = pack_position(model)
        if sequence is None:
            sequence = model.sequence
    return RawAccount(address=model.address, data=data, sequence=sequence or 0)
