"""Ledger RPC access."""

from perp_analytics.rpc.client import SolanaRpcClient
from perp_analytics.rpc.source import LedgerAccountSource

__all__ = ["LedgerAccountSource", "SolanaRpcClient"]
