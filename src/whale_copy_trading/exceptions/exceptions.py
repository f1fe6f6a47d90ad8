"""Custom exceptions for chain access, the swap aggregator and trade execution."""

from __future__ import annotations


class CopyTradingError(Exception):
    """Base exception for copy-trading errors."""

    pass


class MissingRequiredConfigError(CopyTradingError):
    """Raised when a required configuration value is missing."""

    pass


class ApiRequestError(CopyTradingError):
    """Raised when an HTTP request fails after retries."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.body = body
        self.cause = cause


class RateLimitError(ApiRequestError):
    """Raised when the API returns HTTP 429 (Too Many Requests)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class RpcError(CopyTradingError):
    """Raised when a JSON-RPC call returns an error object."""

    def __init__(self, message: str, *, code: int | None = None, method: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.method = method


class TransactionPendingError(CopyTradingError):
    """Raised after a transaction may have reached the mempool without a confirmed outcome.

    Resubmitting would risk executing the same trade twice.
    """

    def __init__(self, message: str, *, tx_hash: str) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(TransactionPendingError):
    """Raised when a submitted transaction has no receipt within the confirmation timeout."""

    def __init__(self, tx_hash: str, timeout_seconds: float) -> None:
        super().__init__(f"no receipt for {tx_hash} after {timeout_seconds:.0f}s", tx_hash=tx_hash)
        self.timeout_seconds = timeout_seconds
