# -*- coding: utf-8 -*-
"""0x Swap API v2 client (allowance-holder price and quote endpoints)."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, cast

import structlog

from whale_copy_trading.utils.validation import mask_address

if TYPE_CHECKING:
    from whale_copy_trading.clients.http import AsyncHttpClient
    from whale_copy_trading.config import Settings

NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"
"""Sentinel the aggregator uses for the chain's native currency."""


def slippage_bps(pct: float) -> int:
    """Convert a percentage (1.0 = 1 %) to basis points."""
    return int(round(pct * 100))


class ZeroExClient:
    """Thin client for 0x price checks and firm quotes.

    Both calls return the decoded JSON body. Callers inspect
    ``liquidityAvailable``, ``issues.allowance``, ``transaction`` and
    ``buyAmount`` themselves.
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

    def _headers(self) -> dict[str, str]:
        cfg = self._settings.aggregator
        return {
            "0x-api-key": cfg.api_key or "",
            "0x-version": cfg.api_version,
        }

    def _params(
        self, sell_token: str, buy_token: str, sell_amount: int, taker: str
    ) -> dict[str, Any]:
        return {
            "chainId": self._settings.chain.chain_id,
            "sellToken": sell_token,
            "buyToken": buy_token,
            "sellAmount": str(sell_amount),
            "taker": taker,
        }

    async def get_price(
        self, sell_token: str, buy_token: str, sell_amount: int, taker: str
    ) -> dict[str, Any]:
        """Indicative price: liquidity flag and any issues (e.g. missing allowance)."""
        body = await self._http.get(
            self._settings.aggregator.price_url,
            params=self._params(sell_token, buy_token, sell_amount, taker),
            headers=self._headers(),
        )
        data = cast(dict[str, Any], body) if isinstance(body, dict) else {}
        self._logger.debug(
            "zeroex_price_received",
            sell_token=sell_token,
            buy_token=buy_token,
            sell_amount=str(sell_amount),
            liquidity_available=data.get("liquidityAvailable"),
            has_allowance_issue=bool(needs_allowance(data)),
        )
        return data

    async def get_quote(
        self,
        sell_token: str,
        buy_token: str,
        sell_amount: int,
        taker: str,
        *,
        slippage_pct: float,
    ) -> dict[str, Any]:
        """Firm quote with a ready-to-sign ``transaction`` object."""
        params = self._params(sell_token, buy_token, sell_amount, taker)
        params["slippageBps"] = slippage_bps(slippage_pct)
        body = await self._http.get(
            self._settings.aggregator.quote_url,
            params=params,
            headers=self._headers(),
        )
        data = cast(dict[str, Any], body) if isinstance(body, dict) else {}
        self._logger.debug(
            "zeroex_quote_received",
            sell_token=sell_token,
            buy_token=buy_token,
            taker_masked=mask_address(taker),
            buy_amount=data.get("buyAmount"),
            has_transaction=isinstance(data.get("transaction"), dict),
        )
        return data


def needs_allowance(price: dict[str, Any]) -> Any:
    """Return the allowance issue from a price response, or None."""
    issues = price.get("issues")
    if not isinstance(issues, dict):
        return None
    return cast(dict[str, Any], issues).get("allowance")
