"""Abstract interface for the processed-transaction set (idempotence)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from whale_copy_trading.models.seen_transaction import SeenTransaction


class ISeenTransactionRepository(ABC):
    """Records which transaction hashes have already been taken by a handler."""

    @abstractmethod
    async def contains(self, tx_hash: str) -> bool:
        ...

    @abstractmethod
    async def try_add(self, seen: SeenTransaction) -> bool:
        """Record seen.tx_hash. Return False if it was already present.

        Check and insert happen without yielding to the event loop, so two
        concurrent callers for the same hash cannot both get True.
        """
        ...
