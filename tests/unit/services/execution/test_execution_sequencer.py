# -*- coding: utf-8 -*-
"""Unit tests for ExecutionSequencer buy/sell paths and their gates."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from whale_copy_trading.events.trade_events import (
    BuyExecutedEvent,
    BuyFailedEvent,
    InsufficientBalanceEvent,
    SellDetectedEvent,
    SellExecutedEvent,
    SellFailedEvent,
)
from whale_copy_trading.exceptions import RpcError
from whale_copy_trading.models.lot import Lot
from whale_copy_trading.persistence.journal.sqlite_journal import TradeJournal
from whale_copy_trading.persistence.repositories.json_file.position_ledger import (
    JsonFilePositionLedger,
)
from whale_copy_trading.services.execution.copy_trade_state import CopyTradeState
from whale_copy_trading.services.execution.dto import TradeResult
from whale_copy_trading.services.execution.execution_sequencer import ExecutionSequencer

ONE_NATIVE = 10**18
MY_BUY_HASH = "0x" + "b" * 64


def _buy_ok() -> TradeResult:
    return TradeResult(
        status="success",
        sell_amount_native=0.01,
        native_price_usd=2000.0,
        tx_hash=MY_BUY_HASH,
        block_number=42,
        buy_amount_raw="777",
        confirmed_at_ms=2_000_000_000_000,
    )


def _sell_ok() -> TradeResult:
    return TradeResult(status="success", sell_amount_native=0.004, native_price_usd=2000.0, tx_hash="0x" + "e" * 64)


class Harness(SimpleNamespace):
    sequencer: ExecutionSequencer
    executor: SimpleNamespace
    rpc: SimpleNamespace
    state: CopyTradeState


@pytest.fixture
def build(
    settings_factory: Callable[..., SimpleNamespace],
    ledger: JsonFilePositionLedger,
    event_bus: Any,
) -> Callable[..., Harness]:
    def _build(*, balance_wei: int = ONE_NATIVE, journal: TradeJournal | None = None, **overrides: Any) -> Harness:
        settings = settings_factory(**overrides)
        executor = SimpleNamespace(
            execute_buy=AsyncMock(return_value=_buy_ok()),
            execute_sell=AsyncMock(return_value=_sell_ok()),
        )
        rpc = SimpleNamespace(get_balance=AsyncMock(return_value=balance_wei))
        prices = SimpleNamespace(get_usd_price=AsyncMock(return_value=2000.0))
        state = CopyTradeState(cooldown_seconds=settings.strategy.cooldown_seconds)
        sequencer = ExecutionSequencer(
            settings=cast(Any, settings),
            state=state,
            ledger=ledger,
            executor=cast(Any, executor),
            rpc_client=cast(Any, rpc),
            price_client=cast(Any, prices),
            event_bus=event_bus,
            journal=journal,
        )
        return Harness(sequencer=sequencer, executor=executor, rpc=rpc, state=state)

    return _build


async def test_buy_success_opens_lot_and_emits_event(
    build: Callable[..., Harness], ledger: JsonFilePositionLedger, event_bus: Any, wallet: str, token: str
) -> None:
    h = build()

    result = await h.sequencer.consider_buy(wallet, token, "0xwhale1", detected_at_ms=1_999_999_998_500)

    assert result is not None and result.succeeded
    h.executor.execute_buy.assert_awaited_once_with(token, 20.0)
    lots = await ledger.lots_for_token(wallet, token)
    assert [(lot.whale_tx_hash, lot.my_tx_hash) for lot in lots] == [("0xwhale1", MY_BUY_HASH)]
    (event,) = event_bus.of_type(BuyExecutedEvent)
    assert event.delay_ms == 1500
    assert event.buy_amount_raw == "777"


async def test_second_buy_within_cooldown_is_noop(
    build: Callable[..., Harness], ledger: JsonFilePositionLedger, event_bus: Any, wallet: str, token: str
) -> None:
    h = build()

    await h.sequencer.consider_buy(wallet, token, "0xwhale1")
    second = await h.sequencer.consider_buy(wallet, token, "0xwhale2")

    assert second is None
    assert h.executor.execute_buy.await_count == 1
    assert h.rpc.get_balance.await_count == 1
    assert len(await ledger.lots_for_token(wallet, token)) == 1
    assert len(event_bus.dispatched) == 1


async def test_insufficient_balance_blocks_execution_and_notifies_once(
    build: Callable[..., Harness], ledger: JsonFilePositionLedger, event_bus: Any, wallet: str, token: str
) -> None:
    # 0.0104 < (20 / 2000) * 1.05
    h = build(balance_wei=10_400_000_000_000_000, strategy={"cooldown_seconds": 0.0})

    assert await h.sequencer.consider_buy(wallet, token, "0xwhale1") is None
    assert await h.sequencer.consider_buy(wallet, token, "0xwhale2") is None

    h.executor.execute_buy.assert_not_awaited()
    events = event_bus.of_type(InsufficientBalanceEvent)
    assert len(events) == 1
    assert events[0].required_native == pytest.approx(0.0105)
    assert h.state.paused is True
    assert await ledger.unique_tokens(wallet) == []


async def test_balance_just_above_threshold_is_sufficient(
    build: Callable[..., Harness], wallet: str, token: str
) -> None:
    h = build(balance_wei=10_500_000_000_001_000)

    result = await h.sequencer.consider_buy(wallet, token, "0xwhale1")

    assert result is not None
    h.executor.execute_buy.assert_awaited_once()


async def test_repeat_balance_notifications_restores_every_time(
    build: Callable[..., Harness], event_bus: Any, wallet: str, token: str
) -> None:
    h = build(
        balance_wei=0,
        strategy={"cooldown_seconds": 0.0, "repeat_balance_notifications": True},
    )

    for n in range(3):
        await h.sequencer.consider_buy(wallet, token, f"0xwhale{n}")

    assert len(event_bus.of_type(InsufficientBalanceEvent)) == 3


async def test_successful_balance_check_resumes_and_rearms_notification(
    build: Callable[..., Harness], event_bus: Any, wallet: str, token: str
) -> None:
    h = build(balance_wei=0, strategy={"cooldown_seconds": 0.0})
    h.rpc.get_balance.side_effect = [0, ONE_NATIVE, 0]

    for n in range(3):
        await h.sequencer.consider_buy(wallet, token, f"0xwhale{n}")

    assert len(event_bus.of_type(InsufficientBalanceEvent)) == 2
    assert h.executor.execute_buy.await_count == 1


async def test_balance_lookup_error_skips_buy(
    build: Callable[..., Harness], event_bus: Any, wallet: str, token: str
) -> None:
    h = build()
    h.rpc.get_balance.side_effect = RpcError("RPC error: timeout", method="eth_getBalance")

    assert await h.sequencer.consider_buy(wallet, token, "0xwhale1") is None
    h.executor.execute_buy.assert_not_awaited()
    assert event_bus.dispatched == []


async def test_buy_failure_emits_failed_event_without_lot(
    build: Callable[..., Harness], ledger: JsonFilePositionLedger, event_bus: Any, wallet: str, token: str
) -> None:
    h = build()
    h.executor.execute_buy.return_value = TradeResult.failed("transaction reverted", tx_hash=MY_BUY_HASH)

    await h.sequencer.consider_buy(wallet, token, "0xwhale1")

    (event,) = event_bus.of_type(BuyFailedEvent)
    assert event.error_message == "transaction reverted"
    assert event.my_tx_hash == MY_BUY_HASH
    assert await ledger.lots_for_token(wallet, token) == []


async def test_sell_two_lots_uses_one_of_remaining_fractions(
    build: Callable[..., Harness],
    ledger: JsonFilePositionLedger,
    event_bus: Any,
    wallet: str,
    token: str,
    lot_factory: Callable[..., Lot],
) -> None:
    first, second = lot_factory(1), lot_factory(2)
    await ledger.add_lot(wallet, first)
    await ledger.add_lot(wallet, second)
    h = build()

    results = await h.sequencer.consider_sell(wallet, token, "0xwhalesell")

    assert [r.status for r in results] == ["success", "success"]
    assert [c.args for c in h.executor.execute_sell.await_args_list] == [(token, 0.5), (token, 1.0)]
    assert await ledger.lots_for_token(wallet, token) == []
    (detected,) = event_bus.of_type(SellDetectedEvent)
    assert detected.open_lots == 2
    executed = event_bus.of_type(SellExecutedEvent)
    assert [e.lot_tx_hash for e in executed] == [first.my_tx_hash, second.my_tx_hash]
    assert [e.remaining_lots for e in executed] == [1, 0]


async def test_concurrent_sales_of_same_token_close_each_lot_once(
    build: Callable[..., Harness],
    ledger: JsonFilePositionLedger,
    event_bus: Any,
    wallet: str,
    token: str,
    lot_factory: Callable[..., Lot],
) -> None:
    first, second = lot_factory(1), lot_factory(2)
    await ledger.add_lot(wallet, first)
    await ledger.add_lot(wallet, second)
    h = build()

    async def sell(token_: str, fraction: float) -> TradeResult:
        await asyncio.sleep(0)
        return _sell_ok()

    h.executor.execute_sell.side_effect = sell

    await asyncio.gather(
        h.sequencer.consider_sell(wallet, token, "0xwhalesell1"),
        h.sequencer.consider_sell(wallet, token, "0xwhalesell2"),
    )

    assert [c.args for c in h.executor.execute_sell.await_args_list] == [(token, 0.5), (token, 1.0)]
    executed = event_bus.of_type(SellExecutedEvent)
    assert [e.lot_tx_hash for e in executed] == [first.my_tx_hash, second.my_tx_hash]
    assert await ledger.lots_for_token(wallet, token) == []


async def test_sell_skip_for_zero_balance_closes_lot(
    build: Callable[..., Harness],
    ledger: JsonFilePositionLedger,
    event_bus: Any,
    wallet: str,
    token: str,
    lot_factory: Callable[..., Lot],
) -> None:
    await ledger.add_lot(wallet, lot_factory(1))
    h = build()
    h.executor.execute_sell.return_value = TradeResult.skipped("no_balance")

    await h.sequencer.consider_sell(wallet, token, "0xwhalesell")

    assert await ledger.lots_for_token(wallet, token) == []
    (event,) = event_bus.of_type(SellExecutedEvent)
    assert event.skipped is True


async def test_sell_failure_keeps_lot_and_stops(
    build: Callable[..., Harness],
    ledger: JsonFilePositionLedger,
    event_bus: Any,
    wallet: str,
    token: str,
    lot_factory: Callable[..., Lot],
) -> None:
    await ledger.add_lot(wallet, lot_factory(1))
    await ledger.add_lot(wallet, lot_factory(2))
    h = build()
    h.executor.execute_sell.return_value = TradeResult.failed("transaction reverted", attempts=3)

    results = await h.sequencer.consider_sell(wallet, token, "0xwhalesell")

    assert [r.status for r in results] == ["failed"]
    assert len(await ledger.lots_for_token(wallet, token)) == 2
    (event,) = event_bus.of_type(SellFailedEvent)
    assert event.attempts == 3
    assert event_bus.of_type(SellExecutedEvent) == []


async def test_sell_with_unknown_token_only_notifies(
    build: Callable[..., Harness],
    ledger: JsonFilePositionLedger,
    event_bus: Any,
    wallet: str,
    token: str,
    lot_factory: Callable[..., Lot],
) -> None:
    await ledger.add_lot(wallet, lot_factory(1))
    h = build()

    assert await h.sequencer.consider_sell(wallet, None, "0xwhalesell") == []

    h.executor.execute_sell.assert_not_awaited()
    (event,) = event_bus.dispatched
    assert isinstance(event, SellDetectedEvent)
    assert event.token is None
    assert len(await ledger.lots_for_token(wallet, token)) == 1


async def test_sell_without_lots_notifies_only(
    build: Callable[..., Harness], event_bus: Any, wallet: str, token: str
) -> None:
    h = build()

    assert await h.sequencer.consider_sell(wallet, token, "0xwhalesell") == []

    h.executor.execute_sell.assert_not_awaited()
    (event,) = event_bus.dispatched
    assert event.open_lots == 0


async def test_outcomes_are_journaled(
    tmp_path: Path,
    build: Callable[..., Harness],
    wallet: str,
    token: str,
) -> None:
    with TradeJournal(tmp_path / "trades.db") as journal:
        h = build(journal=journal)
        h.executor.execute_sell.return_value = TradeResult.skipped("no_balance")

        await h.sequencer.consider_buy(wallet, token, "0xwhale1", detected_at_ms=1_999_999_999_000)
        await h.sequencer.consider_sell(wallet, token, "0xwhale2")

        buy, sell = journal.get_trade(1), journal.get_trade(2)
        summary = journal.summary(wallet=wallet)

    assert buy is not None and sell is not None
    assert (buy["side"], buy["status"], buy["delay_ms"], buy["my_tx_hash"]) == ("BUY", "success", 1000, MY_BUY_HASH)
    assert (sell["side"], sell["status"], sell["error_msg"], sell["token_in"]) == ("SELL", "skipped", "no_balance", token)
    assert summary.executed == 1
    assert summary.skipped == 1
