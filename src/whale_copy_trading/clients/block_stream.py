# -*- coding: utf-8 -*-
"""WebSocket newHeads subscription (eth_subscribe) over aiohttp."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING, Any, Optional

import aiohttp
import structlog

from whale_copy_trading.exceptions import RpcError

if TYPE_CHECKING:
    from whale_copy_trading.clients.http import AsyncHttpClient
    from whale_copy_trading.config import Settings


class SubscriptionClosedError(RpcError):
    """Raised when the WebSocket closes or errors while subscribed."""


class NewHeadsStream:
    """Yields block hashes from an ``eth_subscribe("newHeads")`` subscription.

    One call to ``heads()`` is one connection. Closure or error ends it with
    SubscriptionClosedError; reconnecting is the caller's job. aiohttp sends a
    ping every ``chain.heartbeat_seconds`` to keep idle connections open.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def heads(self) -> AsyncIterator[str]:
        """Connect, subscribe and yield each new head's block hash."""
        cfg = self._settings.chain
        session = await self._http.session()
        async with session.ws_connect(cfg.ws_url, heartbeat=cfg.heartbeat_seconds) as ws:
            await ws.send_json(
                {"jsonrpc": "2.0", "id": 1, "method": "eth_subscribe", "params": ["newHeads"]}
            )
            subscription_id: Optional[str] = None
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    data = _loads(msg.data)
                    if data is None:
                        continue
                    if data.get("id") == 1:
                        if data.get("error"):
                            raise SubscriptionClosedError(
                                f"eth_subscribe rejected: {data['error']}", method="eth_subscribe"
                            )
                        subscription_id = str(data.get("result"))
                        self._logger.info("block_stream_subscribed", subscription_id=subscription_id)
                        continue
                    block_hash = _head_hash(data, subscription_id)
                    if block_hash:
                        yield block_hash
                elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                    break
        raise SubscriptionClosedError("WebSocket subscription closed", method="eth_subscribe")


def _loads(raw: str) -> dict[str, Any] | None:
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _head_hash(data: dict[str, Any], subscription_id: Optional[str]) -> Optional[str]:
    """Extract the block hash from an eth_subscription notification."""
    if data.get("method") != "eth_subscription":
        return None
    params = data.get("params")
    if not isinstance(params, dict):
        return None
    if subscription_id is not None and params.get("subscription") != subscription_id:
        return None
    result = params.get("result")
    if not isinstance(result, dict):
        return None
    block_hash = result.get("hash")
    return str(block_hash) if block_hash else None
