# -*- coding: utf-8 -*-
"""Async HTTP client with retries and rate-limit handling."""

from __future__ import annotations

import asyncio
import random
import uuid
from typing import Any, Callable, Dict, Literal, Optional

import aiohttp
import structlog
from structlog.contextvars import bound_contextvars

from whale_copy_trading.config import Settings
from whale_copy_trading.exceptions import ApiRequestError, RateLimitError


def _is_retryable_status(status: int) -> bool:
    return status == 429 or status >= 500


class AsyncHttpClient:
    """Async HTTP client shared by the RPC, aggregator and price clients.

    Retries connection errors, timeouts, 429 and 5xx responses with exponential
    backoff. Other 4xx responses fail immediately with the response body kept on
    the raised ApiRequestError. If no session is injected, one is created lazily
    and must be closed via aclose() (or by using the client as a context manager).
    """

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Configuration (api.timeout_seconds, api.max_retries).
            session: Optional shared aiohttp session. If None, the client
                creates and owns a session.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._session = session
        self._owns_session = session is None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def session(self) -> aiohttp.ClientSession:
        """Return the underlying session (created on first use)."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._settings.api.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def aclose(self) -> None:
        """Close the session if this client owns it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> AsyncHttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with jitter, capped at 4 seconds."""
        base = min(4.0, 0.25 * (2**attempt))
        return base + random.uniform(0.0, 0.15)

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Perform a GET request and return parsed JSON.

        Raises:
            RateLimitError: When every attempt was answered with 429.
            ApiRequestError: On a non-retryable status or when retries are exhausted.
        """
        return await self._request("GET", url, params=params or {}, headers=headers)

    async def post(
        self,
        url: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Perform a POST request with a JSON body and return parsed JSON.

        Raises:
            ApiRequestError: On a non-retryable status or when retries are exhausted.
        """
        return await self._request("POST", url, json=json or {}, headers=headers)

    async def _request(
        self,
        method: Literal["GET", "POST"],
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        request_id = uuid.uuid4().hex[:12]
        max_retries = self._settings.api.max_retries
        last_error: Optional[Exception] = None
        last_status: Optional[int] = None
        event_prefix = f"http_{method.lower()}"

        with bound_contextvars(
            http_method=method,
            http_url=url,
            http_request_id=request_id,
        ):
            for attempt in range(max_retries):
                with bound_contextvars(http_attempt=attempt + 1):
                    try:
                        session = await self.session()
                        async with session.request(
                            method, url, params=params, json=json, headers=headers
                        ) as response:
                            if response.status < 400:
                                return await response.json(content_type=None)
                            body = await response.text()
                            last_status = response.status
                            if not _is_retryable_status(response.status):
                                self._logger.warning(
                                    f"{event_prefix}_rejected",
                                    http_status_code=response.status,
                                    http_body=body[:500],
                                )
                                raise ApiRequestError(
                                    f"{method} {url} returned {response.status}",
                                    url=url,
                                    status_code=response.status,
                                    body=body,
                                )
                            retry_after = self._retry_after(response)
                            self._logger.debug(
                                f"{event_prefix}_retry",
                                http_status_code=response.status,
                                http_retry_after_seconds=retry_after,
                            )
                            last_error = ApiRequestError(
                                f"{method} {url} returned {response.status}",
                                url=url,
                                status_code=response.status,
                                body=body,
                            )
                            await asyncio.sleep(retry_after or self._backoff_delay(attempt))
                    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                        last_error = e
                        self._logger.debug(
                            f"{event_prefix}_retry",
                            error_type=type(e).__name__,
                            error_message=str(e),
                        )
                        await asyncio.sleep(self._backoff_delay(attempt))

            self._logger.warning(
                f"{event_prefix}_failed",
                http_status_code=last_status,
                http_attempts=max_retries,
                error_type=type(last_error).__name__ if last_error else None,
                error_message=str(last_error) if last_error else None,
            )
            if last_status == 429:
                raise RateLimitError(url=url) from last_error
            raise ApiRequestError(
                f"{method} failed after {max_retries} attempts: {url}",
                url=url,
                status_code=last_status,
                body=getattr(last_error, "body", None),
                cause=last_error,
            ) from last_error

    @staticmethod
    def _retry_after(response: aiohttp.ClientResponse) -> Optional[float]:
        header = response.headers.get("Retry-After")
        if not header:
            return None
        try:
            value = float(header)
        except ValueError:
            return None
        return value if value > 0 else None
