# -*- coding: utf-8 -*-
"""Tests for environment-driven Settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from whale_copy_trading.config import Settings

REQUIRED = [
    "CHAIN__WS_URL",
    "CHAIN__HTTP_URL",
    "AGGREGATOR__API_KEY",
    "WALLET__ADDRESS",
    "WALLET__PRIVATE_KEY",
    "TRACKING__TARGET_WALLETS",
    "STRATEGY__TRADE_AMOUNT_USD",
]


def _settings(**overrides: object) -> Settings:
    return Settings.from_env(_env_file=None, **overrides)


def test_defaults_report_every_required_value(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in REQUIRED:
        monkeypatch.delenv(name, raising=False)

    assert _settings().missing_required() == REQUIRED


def test_nested_env_vars_and_wallet_list(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(
        "TRACKING__TARGET_WALLETS",
        " 0xAbC0000000000000000000000000000000000001 , ,0xdef0000000000000000000000000000000000002",
    )
    monkeypatch.setenv("STRATEGY__COOLDOWN_SECONDS", "30")
    monkeypatch.setenv("CHAIN__CHAIN_ID", "1")

    settings = _settings()

    assert settings.tracking.target_wallets == [
        "0xabc0000000000000000000000000000000000001",
        "0xdef0000000000000000000000000000000000002",
    ]
    assert settings.strategy.cooldown_seconds == 30.0
    assert settings.chain.chain_id == 1


def test_balance_buffer_has_a_floor(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STRATEGY__BALANCE_BUFFER_PCT", "1")

    with pytest.raises(ValidationError):
        _settings()


def test_complete_configuration_has_nothing_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHAIN__WS_URL", "wss://node/ws")
    monkeypatch.setenv("CHAIN__HTTP_URL", "https://node/rpc")
    monkeypatch.setenv("AGGREGATOR__API_KEY", "k")
    monkeypatch.setenv("WALLET__ADDRESS", "0x9f0a1b2c3d4e5f60718293a4b5c6d7e8f9012345")
    monkeypatch.setenv("WALLET__PRIVATE_KEY", "0x" + "11" * 32)
    monkeypatch.setenv("TRACKING__TARGET_WALLETS", "0x2d27b6e21b3d4d7c9a43fdf58f12345678907706")
    monkeypatch.setenv("STRATEGY__TRADE_AMOUNT_USD", "20")

    assert _settings().missing_required() == []
