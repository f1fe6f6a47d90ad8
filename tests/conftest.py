# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from whale_copy_trading.models.lot import Lot
from whale_copy_trading.persistence.repositories.json_file.position_ledger import (
    JsonFilePositionLedger,
)

WRAPPED_NATIVE = "0x4200000000000000000000000000000000000006"


class FakeEventBus:
    """Records dispatched events instead of running handlers."""

    def __init__(self) -> None:
        self.dispatched: list[Any] = []
        self.handlers: dict[str, list[Callable[[Any], Any]]] = {}

    def dispatch(self, event: Any) -> Any:
        self.dispatched.append(event)
        return event

    def on(self, event_type: Any, handler: Callable[[Any], Any]) -> None:
        self.handlers.setdefault(event_type.__name__, []).append(handler)

    def of_type(self, event_type: type[Any]) -> list[Any]:
        return [e for e in self.dispatched if isinstance(e, event_type)]


@pytest.fixture
def wallet() -> str:
    """Default tracked (whale) wallet used by tests."""
    return "0x2d27b6e21b3d4d7c9a43fdf58f12345678907706"


@pytest.fixture
def my_wallet() -> str:
    """Managed wallet that executes the copies."""
    return "0x9f0a1b2c3d4e5f60718293a4b5c6d7e8f9012345"


@pytest.fixture
def token() -> str:
    """Default ERC-20 token traded in tests."""
    return "0x532f27101965dd16442e59d40670faf5ebb142e4"


@pytest.fixture
def wrapped_native() -> str:
    return WRAPPED_NATIVE


@pytest.fixture
def tx_hash() -> Callable[[int], str]:
    """tx_hash(n) -> deterministic 0x + 64 hex transaction hash."""
    return lambda n: "0x" + format(n, "064x")


@pytest.fixture
def D() -> Callable[[Any], Decimal]:
    """Decimal helper: D('1.23') -> Decimal('1.23')."""
    return lambda value: Decimal(str(value))


@pytest.fixture
def settings_factory(wallet: str, my_wallet: str) -> Callable[..., SimpleNamespace]:
    """Build a settings-like namespace; override sections with dicts, e.g. strategy={"cooldown_seconds": 0}."""

    def _build(**overrides: dict[str, Any]) -> SimpleNamespace:
        sections: dict[str, dict[str, Any]] = {
            "chain": {
                "ws_url": "wss://node.example/ws",
                "http_url": "https://node.example/rpc",
                "chain_id": 8453,
                "wrapped_native_address": WRAPPED_NATIVE,
                "reconnect_delay_seconds": 0.0,
                "heartbeat_seconds": 30.0,
                "confirmation_timeout_seconds": 1.0,
                "confirmation_poll_seconds": 0.1,
            },
            "wallet": {"address": my_wallet, "private_key": None},
            "aggregator": {
                "price_url": "https://api.0x.org/swap/allowance-holder/price",
                "quote_url": "https://api.0x.org/swap/allowance-holder/quote",
                "api_key": "test-key",
                "api_version": "v2",
                "allowance_holder": "0x0000000000001ff3684f28c67538d4d072c22734",
                "buy_slippage_pct": 1.0,
                "sell_slippage_pct": 3.0,
                "approval_settle_seconds": 0.0,
            },
            "price": {
                "url": "https://api.coingecko.com/api/v3/simple/price",
                "coin_id": "ethereum",
                "cache_ttl_seconds": 30.0,
                "fallback_usd": 2000.0,
            },
            "tracking": {
                "target_wallets": [wallet],
                "resolve_delay_seconds": 0.0,
                "receipt_poll_attempts": 3,
                "receipt_poll_interval_seconds": 0.0,
                "max_concurrent_handlers": 8,
                "shutdown_timeout_seconds": 1.0,
            },
            "strategy": {
                "trade_amount_usd": 20.0,
                "cooldown_seconds": 10.0,
                "balance_buffer_pct": 5.0,
                "sell_retries": 3,
                "sell_retry_delay_seconds": 0.0,
                "gas_limit_multiplier": 1.3,
                "default_gas_limit": 500_000,
                "repeat_balance_notifications": False,
                "low_balance_warning_native": 0.005,
            },
            "persistence": {
                "positions_file": "data/positions.json",
                "journal_enabled": False,
                "journal_path": "data/trades.db",
            },
        }
        for name, values in overrides.items():
            sections.setdefault(name, {}).update(values)
        return SimpleNamespace(**{k: SimpleNamespace(**v) for k, v in sections.items()})

    return _build


@pytest.fixture
def settings(settings_factory: Callable[..., SimpleNamespace]) -> SimpleNamespace:
    return settings_factory()


@pytest.fixture
def event_bus() -> FakeEventBus:
    """Recording event bus per test."""
    return FakeEventBus()


@pytest.fixture
def ledger(tmp_path: Path) -> JsonFilePositionLedger:
    """Fresh JSON ledger in a temporary directory."""
    return JsonFilePositionLedger(tmp_path / "positions.json")


@pytest.fixture
def lot_factory(token: str, tx_hash: Callable[[int], str], D: Callable[[Any], Decimal]) -> Callable[..., Lot]:
    """Build a Lot with defaults; n picks distinct hashes."""

    def _build(n: int = 1, **overrides: Any) -> Lot:
        return Lot.create(
            overrides.pop("token", token),
            overrides.pop("whale_tx_hash", tx_hash(1000 + n)),
            overrides.pop("my_tx_hash", tx_hash(2000 + n)),
            overrides.pop("amount_usd", D("20")),
            opened_at=overrides.pop("opened_at", None),
        )

    return _build
