# -*- coding: utf-8 -*-
"""Unit tests for InMemorySeenTransactionRepository."""

from __future__ import annotations

import pytest

from whale_copy_trading.models.seen_transaction import SeenTransaction
from whale_copy_trading.persistence.repositories.in_memory.seen_transaction_repository import (
    InMemorySeenTransactionRepository,
)


async def test_try_add_accepts_a_hash_once(wallet: str) -> None:
    repo = InMemorySeenTransactionRepository()

    first = await repo.try_add(SeenTransaction.create("0xABC", wallet))
    second = await repo.try_add(SeenTransaction.create("0xabc ", wallet))

    assert first is True
    assert second is False
    assert len(repo) == 1


async def test_contains_normalizes_hash(wallet: str) -> None:
    repo = InMemorySeenTransactionRepository()
    await repo.try_add(SeenTransaction.create("0xabc", wallet))

    assert await repo.contains(" 0xABC") is True
    assert await repo.contains("0xdef") is False


def test_seen_transaction_rejects_empty_hash(wallet: str) -> None:
    with pytest.raises(ValueError):
        SeenTransaction.create("  ", wallet)
