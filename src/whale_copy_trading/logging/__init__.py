"""Logging setup."""

from whale_copy_trading.logging.config import configure_logging

__all__ = ["configure_logging"]
