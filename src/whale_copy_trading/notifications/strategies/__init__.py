"""Notification strategies (delivery channels)."""

from whale_copy_trading.notifications.strategies.base import BaseNotificationStrategy
from whale_copy_trading.notifications.strategies.console import ConsoleNotifier
from whale_copy_trading.notifications.strategies.telegram import TelegramNotifier

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "TelegramNotifier",
]
