"""Account decoding."""

from perp_analytics.decoder.accounts import (
    account_kind,
    decode_account,
    decode_custody,
    decode_pool,
    decode_position,
)
from perp_analytics.decoder.layout import (
    DISCRIMINATORS,
    pack_custody,
    pack_pool,
    pack_position,
)

__all__ = [
    "DISCRIMINATORS",
    "account_kind",
    "decode_account",
    "decode_custody",
    "decode_pool",
    "decode_position",
    "pack_custody",
    "pack_pool",
    "pack_position",
]
