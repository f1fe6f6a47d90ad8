"""SeenTransaction: dedup record for a tracked wallet's transaction hash.

Process-lifetime only; a restart may reprocess the most recent blocks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class SeenTransaction:
    """Record that a transaction hash has been taken by a handler."""

    tx_hash: str
    wallet: str
    seen_at: datetime

    @classmethod
    def create(
        cls,
        tx_hash: str,
        wallet: str,
        *,
        seen_at: datetime | None = None,
    ) -> SeenTransaction:
        """Create a new record with a normalized hash."""
        tx_hash = tx_hash.strip().lower()
        if not tx_hash:
            raise ValueError("tx_hash must be non-empty")
        return cls(
            tx_hash=tx_hash,
            wallet=wallet.strip().lower(),
            seen_at=seen_at or datetime.now(UTC),
        )
