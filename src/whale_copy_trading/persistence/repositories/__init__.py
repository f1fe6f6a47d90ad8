# -*- coding: utf-8 -*-
"""Repositories: interfaces (abstractions) and implementations (in_memory, json_file)."""

from whale_copy_trading.persistence.repositories.in_memory import InMemorySeenTransactionRepository
from whale_copy_trading.persistence.repositories.interfaces import (
    IPositionLedger,
    ISeenTransactionRepository,
)
from whale_copy_trading.persistence.repositories.json_file import JsonFilePositionLedger

__all__ = [
    "IPositionLedger",
    "ISeenTransactionRepository",
    "InMemorySeenTransactionRepository",
    "JsonFilePositionLedger",
]
