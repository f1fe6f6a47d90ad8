# -*- coding: utf-8 -*-
"""Repository interfaces (abstractions). Implementations live in in_memory/ and json_file/."""

from whale_copy_trading.persistence.repositories.interfaces.position_ledger import IPositionLedger
from whale_copy_trading.persistence.repositories.interfaces.seen_transaction_repository import (
    ISeenTransactionRepository,
)

__all__ = ["IPositionLedger", "ISeenTransactionRepository"]
