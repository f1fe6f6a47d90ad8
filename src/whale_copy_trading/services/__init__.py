# -*- coding: utf-8 -*-
"""Application services."""

from whale_copy_trading.services.classification import SwapClassifier, classify
from whale_copy_trading.services.execution import (
    CopyTradeState,
    ExecutionSequencer,
    NonceSequencer,
    SwapExecutor,
    TradeResult,
    TransactionSender,
)
from whale_copy_trading.services.ingestion import BlockIngestor
from whale_copy_trading.services.notifications import TradeEventNotifier
from whale_copy_trading.services.pipeline import HandlerGroup, SwapPipeline
from whale_copy_trading.services.resolution import SwapResolver, direction_from_receipt

__all__ = [
    "BlockIngestor",
    "CopyTradeState",
    "ExecutionSequencer",
    "HandlerGroup",
    "NonceSequencer",
    "SwapClassifier",
    "SwapExecutor",
    "SwapPipeline",
    "SwapResolver",
    "TradeEventNotifier",
    "TradeResult",
    "TransactionSender",
    "classify",
    "direction_from_receipt",
]
