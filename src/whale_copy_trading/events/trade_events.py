"""Copy-trade outcome events (emitted by the execution sequencer and the swap pipeline)."""

from __future__ import annotations

from bubus import BaseEvent  # type: ignore[import-untyped]


class BuyExecutedEvent(BaseEvent[None]):
    """A copied buy confirmed on chain and a lot was opened."""

    whale_wallet: str
    token: str
    whale_tx_hash: str
    my_tx_hash: str
    amount_usd: float
    sell_amount_native: float
    native_price_usd: float
    buy_amount_raw: str | None = None
    block_number: int | None = None
    gas_used: int | None = None
    gas_price_gwei: float | None = None
    gas_cost_native: float | None = None
    delay_ms: int | None = None
    """Detection to confirmation."""


class BuyFailedEvent(BaseEvent[None]):
    """A copied buy could not be quoted, submitted or confirmed."""

    whale_wallet: str
    token: str
    whale_tx_hash: str
    amount_usd: float
    error_message: str | None = None
    my_tx_hash: str | None = None


class SellDetectedEvent(BaseEvent[None]):
    """A tracked wallet sold. token is None when the sold token could not be identified."""

    whale_wallet: str
    whale_tx_hash: str
    token: str | None = None
    open_lots: int = 0


class SellExecutedEvent(BaseEvent[None]):
    """One lot was closed, either by a confirmed sell or by a zero-balance skip."""

    whale_wallet: str
    token: str
    whale_tx_hash: str
    lot_tx_hash: str
    """Buy transaction of the closed lot."""
    skipped: bool = False
    my_tx_hash: str | None = None
    fraction: float = 1.0
    received_native: float = 0.0
    native_price_usd: float | None = None
    lot_amount_usd: float | None = None
    remaining_lots: int = 0
    gas_cost_native: float | None = None


class SellFailedEvent(BaseEvent[None]):
    """A sell ran out of retries; the lot stays open."""

    whale_wallet: str
    token: str
    whale_tx_hash: str
    lot_tx_hash: str
    attempts: int
    error_message: str | None = None


class InsufficientBalanceEvent(BaseEvent[None]):
    """Native balance is below the trade size plus buffer; the buy was not attempted."""

    whale_wallet: str
    token: str
    whale_tx_hash: str
    balance_native: float
    required_native: float
    amount_usd: float
    native_price_usd: float


class SwapDirectionUnknownEvent(BaseEvent[None]):
    """Receipt logs did not reveal whether the swap was a buy or a sale."""

    whale_wallet: str
    whale_tx_hash: str
    reason: str = "direction_unknown"
