"""Persistence layer (position ledger, dedup set, trade journal)."""

from whale_copy_trading.persistence.journal import JournalSummary, TradeJournal
from whale_copy_trading.persistence.repositories import (
    InMemorySeenTransactionRepository,
    IPositionLedger,
    ISeenTransactionRepository,
    JsonFilePositionLedger,
)

__all__ = [
    "IPositionLedger",
    "ISeenTransactionRepository",
    "InMemorySeenTransactionRepository",
    "JournalSummary",
    "JsonFilePositionLedger",
    "TradeJournal",
]
