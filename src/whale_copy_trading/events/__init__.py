# -*- coding: utf-8 -*-
"""Event bus and event types."""

from whale_copy_trading.events.bus import get_event_bus, set_event_bus
from whale_copy_trading.events.trade_events import (
    BuyExecutedEvent,
    BuyFailedEvent,
    InsufficientBalanceEvent,
    SellDetectedEvent,
    SellExecutedEvent,
    SellFailedEvent,
    SwapDirectionUnknownEvent,
)

__all__ = [
    "get_event_bus",
    "set_event_bus",
    "BuyExecutedEvent",
    "BuyFailedEvent",
    "InsufficientBalanceEvent",
    "SellDetectedEvent",
    "SellExecutedEvent",
    "SellFailedEvent",
    "SwapDirectionUnknownEvent",
]
