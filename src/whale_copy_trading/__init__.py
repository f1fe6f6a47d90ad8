"""Whale copy trading: on-chain swap detection and replication."""

from whale_copy_trading.config import get_settings
from whale_copy_trading.DI import Container
from whale_copy_trading.services import BlockIngestor, SwapPipeline, classify

__version__ = "0.1.0"
__all__ = [
    "BlockIngestor",
    "Container",
    "SwapPipeline",
    "classify",
    "get_settings",
]
