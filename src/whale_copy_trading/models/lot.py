# -*- coding: utf-8 -*-
"""Lot: one open position created by a single successfully copied buy.

Lots for the same (tracked wallet, token) are consumed oldest first.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True, slots=True)
class Lot:
    """A copied buy that is still held.

    The ledger only contains lots whose buy transaction was confirmed.
    """

    token: str
    """Lowercase ERC-20 address bought."""
    whale_tx_hash: str
    """Tracked wallet's transaction that triggered the copy."""
    my_tx_hash: str
    """Our confirmed buy transaction."""
    amount_usd: Decimal
    opened_at: datetime

    @classmethod
    def create(
        cls,
        token: str,
        whale_tx_hash: str,
        my_tx_hash: str,
        amount_usd: Decimal,
        *,
        opened_at: Optional[datetime] = None,
    ) -> Lot:
        """Create a lot for a confirmed buy.

        Raises:
            ValueError: If token or my_tx_hash is empty, or amount_usd <= 0.
        """
        token = token.strip().lower()
        if not token or not my_tx_hash.strip():
            raise ValueError("token and my_tx_hash must be non-empty")
        if amount_usd <= 0:
            raise ValueError("amount_usd must be > 0")
        return cls(
            token=token,
            whale_tx_hash=whale_tx_hash.strip().lower(),
            my_tx_hash=my_tx_hash.strip().lower(),
            amount_usd=amount_usd,
            opened_at=opened_at or datetime.now(timezone.utc),
        )
