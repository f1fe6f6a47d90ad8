# -*- coding: utf-8 -*-
"""Telegram notification strategy (python-telegram-bot, async)."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog
from telegram import Bot
from telegram.error import (
    BadRequest,
    Forbidden,
    NetworkError,
    RetryAfter,
    TelegramError,
    TimedOut,
)
from telegram.request import HTTPXRequest

from whale_copy_trading.notifications.strategies.base import BaseNotificationStrategy
from whale_copy_trading.notifications.types import NotificationMessage

if TYPE_CHECKING:
    from whale_copy_trading.config.config import Settings
    from whale_copy_trading.notifications.types import NotificationStyler


class TelegramNotifier(BaseNotificationStrategy):
    """Send HTML notifications to one Telegram chat.

    Keeps a sliding one-minute window of send times to stay under
    ``telegram.messages_per_minute``. Network errors back off exponentially;
    BadRequest/Forbidden drop the message.
    """

    def __init__(
        self,
        settings: "Settings",
        styler: "NotificationStyler",
        *,
        bot: Optional[Bot] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        super().__init__(settings)
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._styler = styler

        cfg = self.settings.telegram
        if not cfg.enabled or not cfg.api_key or not cfg.chat_id:
            raise ValueError("TelegramNotifier requires TELEGRAM__API_KEY and TELEGRAM__CHAT_ID.")
        self.token = str(cfg.api_key)
        self.chat_id = str(cfg.chat_id)

        self._bot: Optional[Bot] = bot
        self._running = False
        self._sent_at: list[float] = []

    @property
    def is_running(self) -> bool:
        return self._running

    async def initialize(self) -> None:
        if self._running:
            self._logger.warning("telegram_already_running")
            return
        if self._bot is None:
            cfg = self.settings.telegram
            request = HTTPXRequest(
                connect_timeout=cfg.connect_timeout,
                read_timeout=cfg.read_timeout,
                write_timeout=cfg.write_timeout,
                pool_timeout=cfg.pool_timeout,
            )
            self._bot = Bot(token=self.token, request=request)
        self._running = True

    async def shutdown(self) -> None:
        self._bot = None
        self._running = False

    async def send_notification(self, message: NotificationMessage) -> None:
        if not self._running:
            self._logger.warning("telegram_not_running_cannot_send")
            return
        await self._send_text(self._styler.render(message, parse_html=True))

    def _backoff(self, attempt: int) -> float:
        return min(60.0, self.settings.telegram.backoff_base_seconds * (2 ** (attempt - 1)))

    async def _send_text(self, text: str) -> None:
        if self._bot is None:
            self._logger.error("telegram_bot_not_initialized")
            return

        await self._apply_rate_limit()
        max_retries = max(1, self.settings.telegram.max_retries)
        for attempt in range(1, max_retries + 1):
            try:
                await self._bot.send_message(chat_id=self.chat_id, text=text, parse_mode="HTML")
                self._sent_at.append(time.monotonic())
                return
            except RetryAfter as exc:
                retry_after = exc.retry_after
                seconds = (
                    retry_after.total_seconds()
                    if hasattr(retry_after, "total_seconds")
                    else float(retry_after)
                )
                self._logger.warning("telegram_rate_limit_retry_after", retry_seconds=seconds)
                await asyncio.sleep(seconds)
            except (BadRequest, Forbidden) as exc:
                self._logger.error(
                    "telegram_fatal_error",
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                )
                return
            except (NetworkError, TimedOut, TelegramError) as exc:
                backoff = self._backoff(attempt)
                self._logger.warning(
                    "telegram_error_retry",
                    error_type=type(exc).__name__,
                    attempt=attempt,
                    max_retries=max_retries,
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)

        self._logger.error("telegram_max_retries_exceeded_message_dropped")

    async def _apply_rate_limit(self) -> None:
        limit = self.settings.telegram.messages_per_minute
        if limit <= 0:
            return
        now = time.monotonic()
        self._sent_at = [t for t in self._sent_at if t >= now - 60]
        if len(self._sent_at) >= limit:
            wait = 60 - (now - self._sent_at[0])
            if wait > 0:
                await asyncio.sleep(wait)
