"""Trade journal (SQLite)."""

from whale_copy_trading.persistence.journal.sqlite_journal import (
    JournalSummary,
    TradeJournal,
    WalletStats,
)

__all__ = ["JournalSummary", "TradeJournal", "WalletStats"]
