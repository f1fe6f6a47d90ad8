# -*- coding: utf-8 -*-
"""Tests for NotificationService."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from whale_copy_trading.notifications.notification_manager import NotificationService
from whale_copy_trading.notifications.types import NotificationMessage


def _channel(**kwargs: object) -> MagicMock:
    channel = MagicMock()
    channel.initialize = AsyncMock()
    channel.shutdown = AsyncMock()
    channel.send_notification = AsyncMock(**kwargs)
    return channel


async def test_messages_reach_every_channel() -> None:
    a, b = _channel(), _channel()
    service = NotificationService(notifiers=[a, b])
    await service.initialize()

    msg = NotificationMessage(event_type="buy_executed", message="m")
    service.notify(msg)
    await service.shutdown()

    a.send_notification.assert_awaited_once_with(msg)
    b.send_notification.assert_awaited_once_with(msg)
    a.shutdown.assert_awaited_once()


async def test_failing_channel_does_not_block_others() -> None:
    bad, good = _channel(side_effect=RuntimeError("telegram down")), _channel()
    service = NotificationService(notifiers=[bad, good], get_logger=lambda _: MagicMock())
    await service.initialize()

    service.notify(NotificationMessage(event_type="sell_failed", message="m"))
    await service.shutdown()

    good.send_notification.assert_awaited_once()


async def test_notify_without_channels_is_a_no_op() -> None:
    service = NotificationService(notifiers=[])
    await service.initialize()

    service.notify(NotificationMessage(event_type="x", message="m"))
    await service.shutdown()


def test_notify_before_initialize_raises() -> None:
    service = NotificationService(notifiers=[_channel()])

    with pytest.raises(RuntimeError):
        service.notify(NotificationMessage(event_type="x", message="m"))
