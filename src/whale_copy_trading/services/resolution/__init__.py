"""Receipt-based swap direction resolution."""

from whale_copy_trading.services.resolution.swap_resolver import (
    TRANSFER_TOPIC,
    WITHDRAWAL_TOPIC,
    SwapResolver,
    direction_from_receipt,
)

__all__ = ["TRANSFER_TOPIC", "WITHDRAWAL_TOPIC", "SwapResolver", "direction_from_receipt"]
