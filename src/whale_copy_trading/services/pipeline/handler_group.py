# -*- coding: utf-8 -*-
"""Bounded group of per-transaction handler tasks."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, Optional

import structlog


class HandlerGroup:
    """Runs handler coroutines as tracked tasks, at most max_concurrent at a time.

    spawn() never waits for the handler: tasks beyond the limit are created
    immediately and queue on the semaphore, so the caller (the block ingestor)
    is never blocked and dispatch order is preserved. shutdown() stops
    accepting work, waits for in-flight tasks up to a timeout and cancels the
    rest.
    """

    def __init__(
        self,
        max_concurrent: int,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def __len__(self) -> int:
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: Optional[str] = None) -> Optional[asyncio.Task[None]]:
        """Schedule coro. Returns None (and closes coro) once shutdown has started."""
        if self._closed:
            coro.close()
            self._logger.warning("handler_rejected_shutting_down", handler=name)
            return None
        task = asyncio.create_task(self._run(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, coro: Coroutine[Any, Any, Any], name: Optional[str]) -> None:
        async with self._semaphore:
            try:
                await coro
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._logger.exception(
                    "handler_exception",
                    handler=name,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )

    async def join(self) -> None:
        """Wait until every task spawned so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self, timeout: float) -> int:
        """Stop accepting handlers, wait up to timeout seconds, cancel the rest.

        Returns:
            Number of tasks that had to be cancelled.
        """
        self._closed = True
        pending = set(self._tasks)
        if not pending:
            return 0
        self._logger.info("handler_group_draining", in_flight=len(pending), timeout_seconds=timeout)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            self._logger.warning("handler_group_cancelled", cancelled=len(still_running))
        return len(still_running)
