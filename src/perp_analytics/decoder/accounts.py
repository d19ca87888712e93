"""Account decoder — raw ledger bytes into typed Pool / Custody / Position records.

Decoding is pure: the same bytes always give the same record or the same
error.  Checks run in a fixed order: discriminator length, discriminator
value, full layout length, then field values.
"""

from __future__ import annotations

from perp_analytics.decoder.layout import (
    CUSTODY,
    DISCRIMINATOR_LEN,
    DISCRIMINATORS,
    KIND_BY_DISCRIMINATOR,
    LAYOUT_SIZES,
    POOL,
    POSITION,
    PUBKEY_LEN,
    SIDE_BY_CODE,
    pubkey_to_str,
    u128_from_bytes,
)
from perp_analytics.errors import InvalidFieldValue, TruncatedBuffer, UnknownAccountKind
from perp_analytics.models.accounts import AccountKind, Custody, Pool, Position


def account_kind(data: bytes, address: str | None = None) -> AccountKind:
    """Identify an account by its 8-byte discriminator."""
    if len(data) < DISCRIMINATOR_LEN:
        raise TruncatedBuffer(
            "buffer too short for discriminator", address=address, length=len(data)
        )
    kind = KIND_BY_DISCRIMINATOR.get(bytes(data[:DISCRIMINATOR_LEN]))
    if kind is None:
        raise UnknownAccountKind(
            f"unknown discriminator {bytes(data[:DISCRIMINATOR_LEN]).hex()}",
            address=address,
            length=len(data),
        )
    return kind


def _expect(data: bytes, kind: AccountKind, address: str, minimum: int | None = None) -> None:
    if len(data) < DISCRIMINATOR_LEN:
        raise TruncatedBuffer(
            "buffer too short for discriminator",
            address=address,
            length=len(data),
            expected_kind=kind,
        )
    if bytes(data[:DISCRIMINATOR_LEN]) != DISCRIMINATORS[kind]:
        found = KIND_BY_DISCRIMINATOR.get(bytes(data[:DISCRIMINATOR_LEN]), "unknown")
        raise UnknownAccountKind(
            f"discriminator mismatch (found {found})",
            address=address,
            length=len(data),
            expected_kind=kind,
        )
    needed = minimum if minimum is not None else LAYOUT_SIZES[kind]
    if len(data) < needed:
        raise TruncatedBuffer(
            f"need {needed} bytes",
            address=address,
            length=len(data),
            expected_kind=kind,
        )


def decode_pool(address: str, data: bytes) -> Pool:
    _expect(data, "Pool", address)
    (
        _disc,
        name,
        aum_usd,
        increase_bps,
        decrease_bps,
        inception_time,
        bump,
        count,
    ) = POOL.unpack_from(data)
    _expect(data, "Pool", address, minimum=POOL.size + count * PUBKEY_LEN)
    custodies = tuple(
        pubkey_to_str(bytes(data[offset : offset + PUBKEY_LEN]))
        for offset in range(POOL.size, POOL.size + count * PUBKEY_LEN, PUBKEY_LEN)
    )
    return Pool(
        address=address,
        name=name.rstrip(b"\0").decode("utf-8", errors="replace"),
        aum_usd=u128_from_bytes(aum_usd),
        increase_position_bps=increase_bps,
        decrease_position_bps=decrease_bps,
        inception_time=inception_time,
        bump=bump,
        custodies=custodies,
    )


def decode_custody(address: str, data: bytes) -> Custody:
    _expect(data, "Custody", address)
    (
        _disc,
        pool,
        mint,
        token_account,
        decimals,
        is_stable,
        oracle_account,
        oracle_price,
        oracle_expo,
        oracle_publish_time,
        fees_reserves,
        owned,
        locked,
        guaranteed_usd,
        global_short_sizes,
        global_short_average_prices,
        hourly_funding_bps,
        cumulative_interest_rate,
        bump,
    ) = CUSTODY.unpack_from(data)
    if is_stable not in (0, 1):
        raise InvalidFieldValue(
            f"is_stable byte {is_stable}",
            address=address,
            length=len(data),
            expected_kind="Custody",
        )
    return Custody(
        address=address,
        pool=pubkey_to_str(pool),
        mint=pubkey_to_str(mint),
        token_account=pubkey_to_str(token_account),
        decimals=decimals,
        is_stable=bool(is_stable),
        oracle_account=pubkey_to_str(oracle_account),
        oracle_price=oracle_price,
        oracle_expo=oracle_expo,
        oracle_publish_time=oracle_publish_time,
        fees_reserves=fees_reserves,
        owned=owned,
        locked=locked,
        guaranteed_usd=guaranteed_usd,
        global_short_sizes=global_short_sizes,
        global_short_average_prices=global_short_average_prices,
        hourly_funding_bps=hourly_funding_bps,
        cumulative_interest_rate=u128_from_bytes(cumulative_interest_rate),
        bump=bump,
    )


def decode_position(address: str, data: bytes, sequence: int = 0) -> Position:
    """Decode a Position; *sequence* is the fetch-order index used for tie-breaks."""
    _expect(data, "Position", address)
    (
        _disc,
        owner,
        pool,
        custody,
        collateral_custody,
        open_time,
        update_time,
        side_code,
        price,
        size,
        collateral_usd,
        accumulated_fees_usd,
        realised_pnl_usd,
        cumulative_interest_snapshot,
        locked_amount,
        bump,
    ) = POSITION.unpack_from(data)

    side = SIDE_BY_CODE.get(side_code)
    if side is None:
        raise InvalidFieldValue(
            f"side byte {side_code}",
            address=address,
            length=len(data),
            expected_kind="Position",
        )
    if size > 0 and collateral_usd == 0:
        raise InvalidFieldValue(
            "open position with zero collateral",
            address=address,
            length=len(data),
            expected_kind="Position",
        )

    return Position(
        address=address,
        sequence=sequence,
        owner=pubkey_to_str(owner),
        pool=pubkey_to_str(pool),
        custody=pubkey_to_str(custody),
        collateral_custody=pubkey_to_str(collateral_custody),
        open_time=open_time,
        update_time=update_time,
        side=side,
        price=price,
        size=size,
        collateral_usd=collateral_usd,
        accumulated_fees_usd=accumulated_fees_usd,
        realised_pnl_usd=realised_pnl_usd,
        cumulative_interest_snapshot=u128_from_bytes(cumulative_interest_snapshot),
        locked_amount=locked_amount,
        bump=bump,
    )


def decode_account(address: str, data: bytes, sequence: int = 0) -> Pool | Custody | Position:
    """Dispatch on the discriminator to the matching decoder."""
    kind = account_kind(data, address)
    if kind == "Pool":
        return decode_pool(address, data)
    if kind == "Custody":
        return decode_custody(address, data)
    return decode_position(address, data, sequence)
