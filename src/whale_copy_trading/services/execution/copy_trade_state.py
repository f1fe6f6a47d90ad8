# -*- coding: utf-8 -*-
"""Coordinator state shared by every transaction handler: cooldowns and the balance pause."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum


class BalanceState(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"


@dataclass
class CopyTradeState:
    """Process-lifetime trading state, constructed once and injected into handlers.

    Access is single-threaded (one event loop) and none of the methods await,
    so check-and-set operations are atomic with respect to other handlers.
    """

    cooldown_seconds: float
    clock: Callable[[], float] = field(default=time.monotonic)
    last_trade_at: dict[str, float] = field(default_factory=dict)
    balance_state: BalanceState = BalanceState.ACTIVE

    def try_start_cooldown(self, wallet: str) -> bool:
        """Start wallet's cooldown window. False if one is still running."""
        wallet = wallet.lower()
        now = self.clock()
        last = self.last_trade_at.get(wallet)
        if last is not None and now - last < self.cooldown_seconds:
            return False
        self.last_trade_at[wallet] = now
        return True

    def cooldown_remaining(self, wallet: str) -> float:
        last = self.last_trade_at.get(wallet.lower())
        if last is None:
            return 0.0
        return max(0.0, self.cooldown_seconds - (self.clock() - last))

    @property
    def paused(self) -> bool:
        return self.balance_state is BalanceState.PAUSED

    def pause(self) -> bool:
        """Enter PAUSED. True only on the transition from ACTIVE."""
        if self.paused:
            return False
        self.balance_state = BalanceState.PAUSED
        return True

    def resume(self) -> bool:
        """Return to ACTIVE after a passing balance check. True on the transition."""
        if not self.paused:
            return False
        self.balance_state = BalanceState.ACTIVE
        return True
