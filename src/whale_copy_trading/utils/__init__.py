# -*- coding: utf-8 -*-
"""Utility modules."""

from whale_copy_trading.utils.retry import pause, poll_until, retry_async
from whale_copy_trading.utils.validation import (
    is_hex_address,
    mask_address,
    normalize_address,
    topic_to_address,
)

__all__ = [
    "is_hex_address",
    "mask_address",
    "normalize_address",
    "pause",
    "poll_until",
    "retry_async",
    "topic_to_address",
]
