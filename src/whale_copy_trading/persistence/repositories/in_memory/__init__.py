"""In-memory repository implementations."""

from whale_copy_trading.persistence.repositories.in_memory.seen_transaction_repository import (
    InMemorySeenTransactionRepository,
)

__all__ = ["InMemorySeenTransactionRepository"]
