# -*- coding: utf-8 -*-
"""In-memory seen transaction repository (keyed by lowercase hash)."""

from __future__ import annotations

from whale_copy_trading.models.seen_transaction import SeenTransaction
from whale_copy_trading.persistence.repositories.interfaces.seen_transaction_repository import (
    ISeenTransactionRepository,
)


class InMemorySeenTransactionRepository(ISeenTransactionRepository):
    """Process-lifetime dedup set. Grows with the number of tracked-wallet transactions."""

    def __init__(self) -> None:
        self._store: dict[str, SeenTransaction] = {}

    async def contains(self, tx_hash: str) -> bool:
        return tx_hash.strip().lower() in self._store

    async def try_add(self, seen: SeenTransaction) -> bool:
        if seen.tx_hash in self._store:
            return False
        self._store[seen.tx_hash] = seen
        return True

    def __len__(self) -> int:
        return len(self._store)
