# -*- coding: utf-8 -*-
"""TradeEventNotifier: turns copy-trade events into channel notifications."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog

from whale_copy_trading.events.trade_events import (
    BuyExecutedEvent,
    BuyFailedEvent,
    InsufficientBalanceEvent,
    SellDetectedEvent,
    SellExecutedEvent,
    SellFailedEvent,
    SwapDirectionUnknownEvent,
)
from whale_copy_trading.notifications.types import NotificationMessage

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

    from whale_copy_trading.notifications.notification_manager import NotificationService


class TradeEventNotifier:
    """Subscribes to trade outcome events and sends notifications via NotificationService."""

    def __init__(
        self,
        notification_service: "NotificationService",
        event_bus: Any,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._notification_service = notification_service
        self._event_bus: "EventBus" = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._handlers: list[tuple[type[Any], Callable[[Any], None]]] = [
            (BuyExecutedEvent, self._on_buy_executed),
            (BuyFailedEvent, self._on_buy_failed),
            (SellDetectedEvent, self._on_sell_detected),
            (SellExecutedEvent, self._on_sell_executed),
            (SellFailedEvent, self._on_sell_failed),
            (InsufficientBalanceEvent, self._on_insufficient_balance),
            (SwapDirectionUnknownEvent, self._on_direction_unknown),
        ]

    def start(self) -> None:
        for event_type, handler in self._handlers:
            self._event_bus.on(event_type, handler)
        self._logger.debug("trade_event_notifier_started", subscriptions=len(self._handlers))

    def stop(self) -> None:
        bus_handlers = getattr(self._event_bus, "handlers", {})
        for event_type, handler in self._handlers:
            key = event_type.__name__
            if key in bus_handlers:
                bus_handlers[key] = [h for h in bus_handlers[key] if h != handler]
        self._logger.debug("trade_event_notifier_stopped")

    def _send(self, event_type: str, message: str, payload: dict[str, Any]) -> None:
        self._notification_service.notify(
            NotificationMessage(event_type=event_type, message=message, payload=payload)
        )
        self._logger.debug("trade_event_notified", notification_event_type=event_type)

    def _on_buy_executed(self, event: BuyExecutedEvent) -> None:
        self._send(
            "buy_executed",
            f"Copied buy of ${event.amount_usd:.2f}",
            {
                "wallet": event.whale_wallet,
                "whale_tx_hash": event.whale_tx_hash,
                "token": event.token,
                "amount_usd": event.amount_usd,
                "sell_amount_native": event.sell_amount_native,
                "buy_amount_raw": event.buy_amount_raw,
                "my_tx_hash": event.my_tx_hash,
                "block_number": event.block_number,
                "gas_cost_native": event.gas_cost_native,
                "delay_ms": event.delay_ms,
            },
        )

    def _on_buy_failed(self, event: BuyFailedEvent) -> None:
        self._send(
            "buy_failed",
            "Copy buy failed",
            {
                "wallet": event.whale_wallet,
                "whale_tx_hash": event.whale_tx_hash,
                "token": event.token,
                "amount_usd": event.amount_usd,
                "my_tx_hash": event.my_tx_hash,
                "error_message": event.error_message,
            },
        )

    def _on_sell_detected(self, event: SellDetectedEvent) -> None:
        payload = {
            "wallet": event.whale_wallet,
            "whale_tx_hash": event.whale_tx_hash,
            "token": event.token,
            "open_lots": event.open_lots,
        }
        if event.token is None:
            self._send("sell_unknown_token", "Sale detected but the sold token is unknown; no action taken", payload)
        elif event.open_lots == 0:
            self._send("sell_detected", "Whale sold a token we do not hold; no action taken", payload)
        else:
            self._send("sell_detected", f"Whale sold; closing {event.open_lots} lot(s)", payload)

    def _on_sell_executed(self, event: SellExecutedEvent) -> None:
        payload: dict[str, Any] = {
            "wallet": event.whale_wallet,
            "token": event.token,
            "whale_tx_hash": event.whale_tx_hash,
            "lot_tx_hash": event.lot_tx_hash,
            "my_tx_hash": event.my_tx_hash,
            "fraction": event.fraction,
            "received_native": event.received_native,
            "lot_amount_usd": event.lot_amount_usd,
            "remaining_lots": event.remaining_lots,
            "gas_cost_native": event.gas_cost_native,
            "skipped": event.skipped,
        }
        if event.skipped:
            self._send("sell_skipped", "No token balance left; lot closed without a sale", payload)
        else:
            self._send("sell_executed", "Copied sell confirmed", payload)

    def _on_sell_failed(self, event: SellFailedEvent) -> None:
        self._send(
            "sell_failed",
            "Copy sell failed; lot kept open",
            {
                "wallet": event.whale_wallet,
                "token": event.token,
                "whale_tx_hash": event.whale_tx_hash,
                "lot_tx_hash": event.lot_tx_hash,
                "attempts": event.attempts,
                "error_message": event.error_message,
            },
        )

    def _on_insufficient_balance(self, event: InsufficientBalanceEvent) -> None:
        self._send(
            "insufficient_balance",
            "Buy skipped: native balance below trade size plus buffer",
            {
                "wallet": event.whale_wallet,
                "whale_tx_hash": event.whale_tx_hash,
                "token": event.token,
                "balance_native": event.balance_native,
                "required_native": event.required_native,
                "amount_usd": event.amount_usd,
                "native_price_usd": event.native_price_usd,
            },
        )

    def _on_direction_unknown(self, event: SwapDirectionUnknownEvent) -> None:
        self._send(
            "swap_direction_unknown",
            "Could not tell whether the swap was a buy or a sale; no action taken",
            {
                "wallet": event.whale_wallet,
                "whale_tx_hash": event.whale_tx_hash,
                "reason": event.reason,
            },
        )
