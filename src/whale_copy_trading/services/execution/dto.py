"""Results of copy-trade executions."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

TradeResultStatus = Literal["success", "failed", "skipped"]


@dataclass
class TradeResult:
    """Outcome of one buy or one sell attempt sequence.

    sell_amount_native is the native amount spent for a buy and the native
    amount received for a sell.
    """

    status: TradeResultStatus
    sell_amount_native: float = 0.0
    native_price_usd: float | None = None
    tx_hash: str | None = None
    block_number: int | None = None
    buy_amount_raw: str | None = None
    gas_used: int | None = None
    gas_price_gwei: float | None = None
    gas_cost_native: float | None = None
    confirmed_at_ms: int | None = None
    error: str | None = None
    skip_reason: str | None = None
    attempts: int = 1
    retryable: bool = True

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @classmethod
    def failed(cls, error: str, **kwargs: Any) -> TradeResult:
        return cls(status="failed", error=error, **kwargs)

    @classmethod
    def skipped(cls, reason: str, **kwargs: Any) -> TradeResult:
        return cls(status="skipped", skip_reason=reason, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
