"""Abstract interface for the per-wallet, per-token FIFO position ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from whale_copy_trading.models.lot import Lot


class IPositionLedger(ABC):
    """Open lots keyed by tracked wallet, consumed oldest first per token.

    Every mutation is persisted before the call returns.
    """

    @abstractmethod
    async def load(self) -> None:
        """Load persisted state. Missing or unreadable state starts empty."""
        ...

    @abstractmethod
    async def add_lot(self, wallet: str, lot: Lot) -> None:
        """Append a lot at the end of wallet's sequence."""
        ...

    @abstractmethod
    async def pop_oldest_lot(self, wallet: str, token: str) -> Lot | None:
        """Remove and return the earliest lot for (wallet, token), or None."""
        ...

    @abstractmethod
    async def lots_for_token(self, wallet: str, token: str) -> list[Lot]:
        """Open lots for (wallet, token), oldest first."""
        ...

    @abstractmethod
    async def unique_tokens(self, wallet: str) -> list[str]:
        """Distinct tokens wallet has open lots in, in first-seen order."""
        ...
