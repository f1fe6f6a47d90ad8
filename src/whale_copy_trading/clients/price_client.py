# -*- coding: utf-8 -*-
"""Native currency USD price (CoinGecko simple price) with a TTL cache."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog
from cachetools import TTLCache

from whale_copy_trading.exceptions import ApiRequestError

if TYPE_CHECKING:
    from whale_copy_trading.clients.http import AsyncHttpClient
    from whale_copy_trading.config import Settings


class NativePriceClient:
    """USD price of the native currency.

    Fresh prices are cached for ``price.cache_ttl_seconds``. When the source
    fails, the last known price is returned; before any successful fetch that
    is ``price.fallback_usd``. Never raises for source errors.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: HTTP client for GET requests.
            settings: Configuration (uses settings.price).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._cache: TTLCache[str, float] = TTLCache(
            maxsize=1, ttl=settings.price.cache_ttl_seconds
        )
        self._last_known = settings.price.fallback_usd
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def last_known(self) -> float:
        return self._last_known

    async def get_usd_price(self) -> float:
        """Return the native USD price (cached, last known on failure)."""
        coin_id = self._settings.price.coin_id
        cached = self._cache.get(coin_id)
        if cached is not None:
            return cached
        try:
            body = await self._http.get(
                self._settings.price.url,
                params={"ids": coin_id, "vs_currencies": "usd"},
            )
        except ApiRequestError as e:
            self._logger.warning(
                "native_price_fetch_failed",
                error_type=type(e).__name__,
                error_message=str(e),
                fallback_usd=self._last_known,
            )
            return self._last_known
        price = _extract_usd(body, coin_id)
        if price is None:
            self._logger.warning(
                "native_price_missing_in_response",
                fallback_usd=self._last_known,
            )
            return self._last_known
        self._cache[coin_id] = price
        self._last_known = price
        self._logger.debug("native_price_refreshed", native_price_usd=price)
        return price


def _extract_usd(body: Any, coin_id: str) -> float | None:
    if not isinstance(body, dict):
        return None
    entry = body.get(coin_id)
    if not isinstance(entry, dict):
        return None
    try:
        value = float(entry.get("usd"))  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None
