"""On-chain account layouts — discriminators, struct formats and encoders.

Every account begins with an 8-byte discriminator, the first 8 bytes of
``sha256("account:<Kind>")``.  All integers are little-endian; u128 fields are
carried as 16 raw bytes because ``struct`` has no 128-bit code.

The ``pack_*`` encoders are the exact inverse of the decoders and are what the
test-suite uses to build account buffers from known records.
"""

from __future__ import annotations

import hashlib
import struct

import base58

from perp_analytics.models.accounts import AccountKind, Custody, Pool, Position, Side

PUBKEY_LEN = 32
DISCRIMINATOR_LEN = 8


def discriminator(kind: str) -> bytes:
    return hashlib.sha256(f"account:{kind}".encode()).digest()[:DISCRIMINATOR_LEN]


DISCRIMINATORS: dict[AccountKind, bytes] = {
    "Pool": discriminator("Pool"),
    "Custody": discriminator("Custody"),
    "Position": discriminator("Position"),
}
KIND_BY_DISCRIMINATOR: dict[bytes, AccountKind] = {v: k for k, v in DISCRIMINATORS.items()}

# disc, name, aum_usd(u128), increase_bps, decrease_bps, inception_time, bump, custody count
POOL = struct.Struct("<8s32s16sQQqBI")

# disc, pool, mint, token_account, decimals, is_stable, oracle_account,
# oracle_price, oracle_expo, oracle_publish_time, fees_reserves, owned, locked,
# guaranteed_usd, global_short_sizes, global_short_average_prices,
# hourly_funding_bps, cumulative_interest_rate(u128), bump
CUSTODY = struct.Struct("<8s32s32s32sBB32sqiqQQQQQQQ16sB")

# disc, owner, pool, custody, collateral_custody, open_time, update_time, side,
# price, size, collateral_usd, accumulated_fees_usd, realised_pnl_usd(i64),
# cumulative_interest_snapshot(u128), locked_amount, bump
POSITION = struct.Struct("<8s32s32s32s32sqqBQQQQq16sQB")

LAYOUT_SIZES: dict[AccountKind, int] = {
    "Pool": POOL.size,
    "Custody": CUSTODY.size,
    "Position": POSITION.size,
}

SIDE_BY_CODE: dict[int, Side] = {1: "LONG", 2: "SHORT"}
CODE_BY_SIDE: dict[Side, int] = {v: k for k, v in SIDE_BY_CODE.items()}


# ── Field helpers ─────────────────────────────────────────────


def pubkey_to_str(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


def pubkey_to_bytes(address: str) -> bytes:
    raw = base58.b58decode(address)
    if len(raw) != PUBKEY_LEN:
        raise ValueError(f"address {address!r} decodes to {len(raw)} bytes, expected {PUBKEY_LEN}")
    return raw


def u128_from_bytes(raw: bytes) -> int:
    return int.from_bytes(raw, "little", signed=False)


def u128_to_bytes(value: int) -> bytes:
    return value.to_bytes(16, "little", signed=False)


# ── Encoders ──────────────────────────────────────────────────


def pack_pool(pool: Pool) -> bytes:
    header = POOL.pack(
        DISCRIMINATORS["Pool"],
        pool.name.encode("utf-8"),
        u128_to_bytes(pool.aum_usd),
        pool.increase_position_bps,
        pool.decrease_position_bps,
        pool.inception_time,
        pool.bump,
        len(pool.custodies),
    )
    return header + b"".join(pubkey_to_bytes(c) for c in pool.custodies)


def pack_custody(custody: Custody) -> bytes:
    return CUSTODY.pack(
        DISCRIMINATORS["Custody"],
        pubkey_to_bytes(custody.pool),
        pubkey_to_bytes(custody.mint),
        pubkey_to_bytes(custody.token_account),
        custody.decimals,
        int(custody.is_stable),
        pubkey_to_bytes(custody.oracle_account),
        custody.oracle_price,
        custody.oracle_expo,
        custody.oracle_publish_time,
        custody.fees_reserves,
        custody.owned,
        custody.locked,
        custody.guaranteed_usd,
        custody.global_short_sizes,
        custody.global_short_average_prices,
        custody.hourly_funding_bps,
        u128_to_bytes(custody.cumulative_interest_rate),
        custody.bump,
    )


def pack_position(position: Position) -> bytes:
    return POSITION.pack(
        DISCRIMINATORS["Position"],
        pubkey_to_bytes(position.owner),
        pubkey_to_bytes(position.pool),
        pubkey_to_bytes(position.custody),
        pubkey_to_bytes(position.collateral_custody),
        position.open_time,
        position.update_time,
        CODE_BY_SIDE[position.side],
        position.price,
        position.size,
        position.collateral_usd,
        position.accumulated_fees_usd,
        position.realised_pnl_usd,
        u128_to_bytes(position.cumulative_interest_snapshot),
        position.locked_amount,
        position.bump,
    )
