# -*- coding: utf-8 -*-
"""Base notification strategy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from whale_copy_trading.notifications.types import NotificationMessage

if TYPE_CHECKING:  # pragma: no cover
    from whale_copy_trading.config.config import Settings


class BaseNotificationStrategy(ABC):
    """Abstract delivery channel (console, Telegram, ...)."""

    def __init__(self, settings: "Settings"):
        """
        Args:
            settings: Global configuration.
        """
        self.settings = settings

    @property
    @abstractmethod
    def is_running(self) -> bool:
        """True between initialize() and shutdown()."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        pass

    @abstractmethod
    async def send_notification(self, message: NotificationMessage) -> None:
        """Deliver one message on this channel."""
        pass
