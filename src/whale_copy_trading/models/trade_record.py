# -*- coding: utf-8 -*-
"""TradeRecord: one trade journal row per copy attempt."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal, Optional

TradeStatus = Literal["pending", "success", "failed", "skipped"]
TradeSide = Literal["BUY", "SELL"]


@dataclass(slots=True)
class TradeRecord:
    """Journal row. Timestamps are epoch milliseconds."""

    whale_wallet: str
    my_wallet: str
    side: TradeSide
    token_in: str
    token_out: str
    amount_usd: float
    sell_amount_native: float
    detected_at_ms: int
    executed_at_ms: int
    whale_tx_hash: str
    status: TradeStatus = "pending"
    native_price_usd: Optional[float] = None
    buy_amount_raw: Optional[str] = None
    confirmed_at_ms: Optional[int] = None
    delay_ms: Optional[int] = None
    my_tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    gas_price_gwei: Optional[float] = None
    gas_cost_native: Optional[float] = None
    error_msg: Optional[str] = None
    id: Optional[int] = None

    def to_row(self) -> dict[str, Any]:
        """Column mapping for INSERT (id excluded)."""
        row = asdict(self)
        row.pop("id", None)
        return row
