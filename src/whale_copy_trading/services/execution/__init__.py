"""Copy-trade execution: state, nonce ordering, swaps and sequencing."""

from whale_copy_trading.services.execution.copy_trade_state import BalanceState, CopyTradeState
from whale_copy_trading.services.execution.dto import TradeResult
from whale_copy_trading.services.execution.execution_sequencer import ExecutionSequencer
from whale_copy_trading.services.execution.nonce_sequencer import NonceSequencer, is_nonce_error
from whale_copy_trading.services.execution.swap_executor import SwapExecutor
from whale_copy_trading.services.execution.transaction_sender import (
    ConfirmedTransaction,
    TransactionSender,
)

__all__ = [
    "BalanceState",
    "ConfirmedTransaction",
    "CopyTradeState",
    "ExecutionSequencer",
    "NonceSequencer",
    "SwapExecutor",
    "TradeResult",
    "TransactionSender",
    "is_nonce_error",
]
