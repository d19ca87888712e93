"""Solana JSON-RPC client — program account listing and batched account reads."""

from __future__ import annotations

import base64
import itertools
from typing import Any

import base58
import httpx

from perp_analytics.errors import LedgerSourceError

# Solana caps getMultipleAccounts at 100 keys per request.
MAX_MULTIPLE_ACCOUNTS = 100


class SolanaRpcClient:
    """Async client for the subset of Solana's JSON-RPC API the collector needs."""

    def __init__(
        self,
        rpc_url: str = "https://api.mainnet-beta.solana.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_url = rpc_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    async def _get_http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        """POST one JSON-RPC request and return its ``result``.

        Transport errors, HTTP errors and JSON-RPC ``error`` objects all
        surface as :class:`LedgerSourceError`.
        """
        http = await self._get_http()
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await http.post(self.rpc_url, json=payload)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerSourceError(f"{method} failed: {exc}") from exc

        if not isinstance(body, dict):
            raise LedgerSourceError(f"{method} returned a non-object body: {body!r:.80}")
        err = body.get("error")
        if err:
            if isinstance(err, dict):
                err = f"{err.get('code')}: {err.get('message')}"
            raise LedgerSourceError(f"{method} returned error {err}")
        return body.get("result")

    @staticmethod
    def decode_account_data(account: dict | None) -> bytes | None:
        """Extract raw bytes from an account object encoded as ``[b64, "base64"]``."""
        if account is None:
            return None
        data = account.get("data") if isinstance(account, dict) else None
        if not isinstance(data, list) or len(data) != 2 or data[1] != "base64":
            raise LedgerSourceError(f"unexpected account data encoding: {data!r:.80}")
        try:
            return base64.b64decode(data[0], validate=True)
        except (TypeError, ValueError) as exc:
            raise LedgerSourceError(f"invalid base64 account data: {exc}") from exc

    async def get_program_account_keys(self, program_id: str, discriminator: bytes) -> list[str]:
        """List addresses of *program_id* accounts starting with *discriminator*.

        Uses an empty data slice so only keys come back; bytes are fetched
        separately with :meth:`get_multiple_accounts`.
        """
        result = await self._call(
            "getProgramAccounts",
            [
                program_id,
                {
                    "encoding": "base64",
                    "dataSlice": {"offset": 0, "length": 0},
                    "filters": [
                        {
                            "memcmp": {
                                "offset": 0,
                                "bytes": base58.b58encode(discriminator).decode("ascii"),
                            }
                        }
                    ],
                },
            ],
        )
        try:
            return [str(entry["pubkey"]) for entry in result or []]
        except (KeyError, TypeError) as exc:
            raise LedgerSourceError(f"getProgramAccounts returned a malformed entry: {exc!r}") from exc

    async def get_multiple_accounts(self, addresses: list[str]) -> list[bytes | None]:
        """Fetch raw bytes for up to 100 accounts; ``None`` for missing accounts."""
        if len(addresses) > MAX_MULTIPLE_ACCOUNTS:
            raise ValueError(f"at most {MAX_MULTIPLE_ACCOUNTS} addresses per call")
        if not addresses:
            return []
        result = await self._call(
            "getMultipleAccounts",
            [addresses, {"encoding": "base64"}],
        )
        values = result.get("value") if isinstance(result, dict) else None
        if not isinstance(values, list):
            raise LedgerSourceError(f"getMultipleAccounts returned no value list: {result!r:.80}")
        if len(values) != len(addresses):
            raise LedgerSourceError(
                f"getMultipleAccounts returned {len(values)} accounts for {len(addresses)} keys"
            )
        return [self.decode_account_data(v) for v in values]
