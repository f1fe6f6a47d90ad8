# -*- coding: utf-8 -*-
"""Unit tests for the timed retry primitives."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from whale_copy_trading.utils.retry import pause, poll_until, retry_async


async def test_poll_until_returns_first_non_none() -> None:
    fetch = AsyncMock(side_effect=[None, None, "receipt", "later"])

    result = await poll_until(fetch, max_attempts=5, interval=0)

    assert result == "receipt"
    assert fetch.await_count == 3


async def test_poll_until_gives_up_after_max_attempts() -> None:
    fetch = AsyncMock(return_value=None)

    assert await poll_until(fetch, max_attempts=4, interval=0) is None
    assert fetch.await_count == 4


async def test_pause_returns_early_when_woken() -> None:
    wake = asyncio.Event()
    wake.set()

    await asyncio.wait_for(pause(60.0, wake), timeout=1.0)

    assert wake.is_set() is False


async def test_retry_async_stops_when_result_is_acceptable() -> None:
    seen: list[int] = []

    async def op(attempt: int) -> str:
        seen.append(attempt)
        return "ok" if attempt == 2 else "fail"

    retried: list[tuple[int, str]] = []
    result = await retry_async(
        op,
        max_attempts=5,
        delay=0,
        should_retry=lambda r: r == "fail",
        on_retry=lambda attempt, r: retried.append((attempt, r)),
    )

    assert result == "ok"
    assert seen == [1, 2]
    assert retried == [(1, "fail")]


async def test_retry_async_returns_last_result_when_exhausted() -> None:
    op = AsyncMock(return_value="fail")

    result = await retry_async(op, max_attempts=3, delay=0, should_retry=lambda r: True)

    assert result == "fail"
    assert [c.args[0] for c in op.await_args_list] == [1, 2, 3]


async def test_retry_async_makes_at_least_one_attempt() -> None:
    op = AsyncMock(return_value="x")

    await retry_async(op, max_attempts=0, delay=0, should_retry=lambda r: True)

    op.assert_awaited_once_with(1)
