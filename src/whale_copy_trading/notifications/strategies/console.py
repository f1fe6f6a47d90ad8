# -*- coding: utf-8 -*-
"""Console notifier (plain text on stdout)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from whale_copy_trading.notifications.strategies.base import BaseNotificationStrategy
from whale_copy_trading.notifications.types import NotificationMessage

if TYPE_CHECKING:  # pragma: no cover
    from whale_copy_trading.config import Settings
    from whale_copy_trading.notifications.types import NotificationStyler


class ConsoleNotifier(BaseNotificationStrategy):
    """Print notifications to stdout without HTML markup."""

    def __init__(self, settings: "Settings", styler: "NotificationStyler") -> None:
        super().__init__(settings)
        self._running = False
        self._styler = styler

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        self._running = True

    async def shutdown(self) -> None:
        self._running = False

    async def send_notification(self, message: NotificationMessage) -> None:
        if not self.is_running or not self.settings.console.enabled:
            return
        print(self._styler.render(message, parse_html=False), flush=True)
