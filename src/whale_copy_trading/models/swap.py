"""Swap classification and receipt-based direction results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SwapClassification:
    """What the input bytes of a transaction say about it.

    tokens are lowercase addresses when decoded. A swap without token_out is
    normal and means the direction must be resolved from the receipt.
    """

    is_swap: bool
    protocol: Optional[str] = None
    selector: Optional[str] = None
    token_in: Optional[str] = None
    token_out: Optional[str] = None
    amount_in: Optional[int] = None

    @classmethod
    def not_swap(cls, selector: Optional[str] = None) -> SwapClassification:
        return cls(is_swap=False, selector=selector)

    @property
    def is_decoded(self) -> bool:
        return self.is_swap and self.token_out is not None


@dataclass(frozen=True, slots=True)
class ResolvedSwapDirection:
    """Direction inferred from receipt logs.

    is_sale with token_traded None means a sale was seen but the token could
    not be identified. is_sale False with token_traded None means the direction
    itself is unknown. Neither case may trigger a trade.
    """

    is_sale: bool
    token_traded: Optional[str] = None

    @property
    def is_unknown(self) -> bool:
        return self.token_traded is None
