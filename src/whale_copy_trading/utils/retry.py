"""Timed retry primitives shared by receipt resolution, confirmation waits and sell retries."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Optional


async def pause(interval: float, wake: Optional[asyncio.Event] = None) -> None:
    """Sleep for interval seconds, returning early if wake is set. Clears wake afterwards."""
    if wake is None:
        await asyncio.sleep(interval)
        return
    try:
        await asyncio.wait_for(wake.wait(), timeout=interval)
    except TimeoutError:
        pass
    finally:
        wake.clear()


async def poll_until[T](
    fetch: Callable[[], Awaitable[T | None]],
    *,
    max_attempts: int,
    interval: float,
    wake: Optional[asyncio.Event] = None,
) -> T | None:
    """Call fetch until it returns a non-None value or max_attempts is reached.

    Waits interval seconds between attempts (not after the last one). When wake
    is given, setting it cuts the current wait short.

    Returns:
        The first non-None result, or None when every attempt came back empty.
    """
    for attempt in range(1, max_attempts + 1):
        result = await fetch()
        if result is not None:
            return result
        if attempt < max_attempts:
            await pause(interval, wake)
    return None


async def retry_async[T](
    operation: Callable[[int], Awaitable[T]],
    *,
    max_attempts: int,
    delay: float,
    should_retry: Callable[[T], bool],
    on_retry: Optional[Callable[[int, T], None]] = None,
) -> T:
    """Run operation(attempt) up to max_attempts times with a fixed delay in between.

    Args:
        operation: Coroutine factory receiving the 1-based attempt number.
        max_attempts: Upper bound on attempts (at least one attempt is made).
        delay: Seconds to sleep between attempts.
        should_retry: Predicate on the result; False stops immediately.
        on_retry: Optional hook called before sleeping, with (attempt, result).

    Returns:
        The result of the last attempt made.
    """
    attempts = max(1, max_attempts)
    attempt = 1
    while True:
        result = await operation(attempt)
        if attempt >= attempts or not should_retry(result):
            return result
        if on_retry is not None:
            on_retry(attempt, result)
        await asyncio.sleep(delay)
        attempt += 1
