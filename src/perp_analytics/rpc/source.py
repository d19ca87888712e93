"""Raw account source — lists program accounts per kind and fetches them in pages.

Each listed address gets its sequence index before any bytes are fetched.
Pages are fetched concurrently, but ``asyncio.gather`` returns them in page
order, so the batch handed to the decoder is always in listing order.
"""

from __future__ import annotations

import asyncio

import structlog

from perp_analytics.decoder.layout import DISCRIMINATORS
from perp_analytics.models.accounts import AccountKind, RawAccount
from perp_analytics.rpc.client import MAX_MULTIPLE_ACCOUNTS, SolanaRpcClient

log = structlog.get_logger("ledger_source")


class LedgerAccountSource:
    """Fetches immutable snapshots of the venue's Pool, Custody and Position accounts."""

    def __init__(
        self,
        client: SolanaRpcClient,
        program_id: str,
        batch_size: int = MAX_MULTIPLE_ACCOUNTS,
        max_concurrency: int = 4,
    ) -> None:
        self.client = client
        self.program_id = program_id
        self.batch_size = min(batch_size, MAX_MULTIPLE_ACCOUNTS)
        self.max_concurrency = max_concurrency

    async def fetch(self, kind: AccountKind) -> list[RawAccount]:
        addresses = await self.client.get_program_account_keys(
            self.program_id, DISCRIMINATORS[kind]
        )
        pages = [
            addresses[i : i + self.batch_size]
            for i in range(0, len(addresses), self.batch_size)
        ]
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def fetch_page(page: list[str]) -> list[bytes | None]:
            async with semaphore:
                return await self.client.get_multiple_accounts(page)

        results = await asyncio.gather(*(fetch_page(page) for page in pages))

        accounts: list[RawAccount] = []
        sequence = 0
        for page, datas in zip(pages, results):
            for address, data in zip(page, datas):
                if data is None:
                    log.warning("account_vanished", kind=kind, address=address, sequence=sequence)
                else:
                    accounts.append(RawAccount(address=address, data=data, sequence=sequence))
                sequence += 1

        log.info("accounts_fetched", kind=kind, listed=len(addresses), fetched=len(accounts),
                 pages=len(pages))
        return accounts
