"""Notification subsystem."""

from whale_copy_trading.notifications.notification_manager import NotificationService
from whale_copy_trading.notifications.strategies import (
    BaseNotificationStrategy,
    ConsoleNotifier,
    TelegramNotifier,
)
from whale_copy_trading.notifications.stylers import EventNotificationStyler
from whale_copy_trading.notifications.types import NotificationMessage, NotificationStyler

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "EventNotificationStyler",
    "TelegramNotifier",
    "NotificationMessage",
    "NotificationService",
    "NotificationStyler",
]
