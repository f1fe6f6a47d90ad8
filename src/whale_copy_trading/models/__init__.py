"""Domain models."""

from whale_copy_trading.models.lot import Lot
from whale_copy_trading.models.observed_transaction import ObservedTransaction
from whale_copy_trading.models.seen_transaction import SeenTransaction
from whale_copy_trading.models.swap import ResolvedSwapDirection, SwapClassification
from whale_copy_trading.models.trade_record import TradeRecord, TradeSide, TradeStatus

__all__ = [
    "Lot",
    "ObservedTransaction",
    "ResolvedSwapDirection",
    "SeenTransaction",
    "SwapClassification",
    "TradeRecord",
    "TradeSide",
    "TradeStatus",
]
