"""Dependency injection."""

from whale_copy_trading.DI.container import Container

__all__ = ["Container"]
