# -*- coding: utf-8 -*-
"""Nonce sequencing for the managed account."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog

from whale_copy_trading.utils.validation import mask_address

if TYPE_CHECKING:
    from whale_copy_trading.clients.rpc_client import RpcClient

_NONCE_ERROR_MARKERS = (
    "nonce",
    "replacement transaction underpriced",
    "replacement_underpriced",
)


def is_nonce_error(exc: BaseException) -> bool:
    """True for errors that mean the cached nonce is stale (too low, expired, underpriced replacement)."""
    text = f"{exc} {getattr(exc, 'body', None) or ''}".lower()
    return any(marker in text for marker in _NONCE_ERROR_MARKERS)


class NonceSequencer:
    """Hands out strictly increasing nonces to concurrent submitters.

    The first call primes the cache from the chain's pending nonce; later calls
    increment in memory. asyncio.Lock wakes waiters in FIFO order, so nonces are
    handed out in request order. reset() drops the cache after a nonce error.
    """

    def __init__(
        self,
        rpc_client: RpcClient,
        address: str,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._rpc = rpc_client
        self._address = address
        self._next: Optional[int] = None
        self._lock = asyncio.Lock()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def cached(self) -> Optional[int]:
        return self._next

    async def next_nonce(self) -> int:
        async with self._lock:
            if self._next is None:
                self._next = await self._rpc.get_transaction_count(self._address, "pending")
                self._logger.debug(
                    "nonce_primed",
                    wallet_masked=mask_address(self._address),
                    nonce=self._next,
                )
            nonce = self._next
            self._next += 1
            return nonce

    def reset(self) -> None:
        self._logger.warning("nonce_reset", wallet_masked=mask_address(self._address), cached=self._next)
        self._next = None
