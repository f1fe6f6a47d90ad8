"""Swap classification (selector table and decoders)."""

from whale_copy_trading.services.classification.swap_classifier import (
    KNOWN_ROUTERS,
    SWAP_SELECTORS,
    DecodedSwap,
    SwapClassifier,
    classify,
)

__all__ = ["KNOWN_ROUTERS", "SWAP_SELECTORS", "DecodedSwap", "SwapClassifier", "classify"]
