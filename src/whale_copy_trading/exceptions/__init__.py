"""Exceptions subpackage."""

from whale_copy_trading.exceptions.exceptions import (
    ApiRequestError,
    ConfirmationTimeoutError,
    CopyTradingError,
    MissingRequiredConfigError,
    RateLimitError,
    RpcError,
    TransactionPendingError,
)

__all__ = [
    "ApiRequestError",
    "ConfirmationTimeoutError",
    "CopyTradingError",
    "MissingRequiredConfigError",
    "RateLimitError",
    "RpcError",
    "TransactionPendingError",
]
