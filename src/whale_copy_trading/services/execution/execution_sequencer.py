# -*- coding: utf-8 -*-
"""Execution sequencer: gates, executes and records copied buys and sells."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

import structlog
from web3 import Web3

from whale_copy_trading.clients.aggregator_client import NATIVE_TOKEN_ADDRESS
from whale_copy_trading.events.trade_events import (
    BuyExecutedEvent,
    BuyFailedEvent,
    InsufficientBalanceEvent,
    SellDetectedEvent,
    SellExecutedEvent,
    SellFailedEvent,
)
from whale_copy_trading.exceptions import CopyTradingError
from whale_copy_trading.models.lot import Lot
from whale_copy_trading.models.trade_record import TradeRecord, TradeSide
from whale_copy_trading.utils.validation import mask_address, normalize_address

if TYPE_CHECKING:
    from bubus import BaseEvent, EventBus  # type: ignore[import-untyped]

    from whale_copy_trading.clients.price_client import NativePriceClient
    from whale_copy_trading.clients.rpc_client import RpcClient
    from whale_copy_trading.config import Settings
    from whale_copy_trading.persistence.journal.sqlite_journal import TradeJournal
    from whale_copy_trading.persistence.repositories.interfaces.position_ledger import (
        IPositionLedger,
    )
    from whale_copy_trading.services.execution.copy_trade_state import CopyTradeState
    from whale_copy_trading.services.execution.dto import TradeResult
    from whale_copy_trading.services.execution.swap_executor import SwapExecutor


def _now_ms() -> int:
    return int(time.time() * 1000)


class ExecutionSequencer:
    """Turns a resolved whale swap into our own trade.

    Buy path: cooldown gate, balance guard, one quote-submit-confirm cycle,
    then a new lot. Sell path: for every open lot of the sold token, oldest
    first, sell 1/remaining of the current balance and close the lot on
    success or zero balance. Every attempt is journaled; outcomes are
    dispatched on the event bus.
    """

    def __init__(
        self,
        settings: Settings,
        state: CopyTradeState,
        ledger: IPositionLedger,
        executor: SwapExecutor,
        rpc_client: RpcClient,
        price_client: NativePriceClient,
        event_bus: Optional[Any] = None,
        journal: Optional[TradeJournal] = None,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._state = state
        self._ledger = ledger
        self._executor = executor
        self._rpc = rpc_client
        self._prices = price_client
        self._event_bus: Optional["EventBus"] = event_bus
        self._journal = journal
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._sell_locks: dict[tuple[str, str], asyncio.Lock] = {}

    @property
    def my_wallet(self) -> str:
        return self._settings.wallet.address.lower()

    def _emit(self, event: BaseEvent) -> None:
        if self._event_bus is None:
            return
        self._event_bus.dispatch(event)

    # Buy path

    async def consider_buy(
        self,
        wallet: str,
        token: str,
        whale_tx_hash: str,
        *,
        detected_at_ms: Optional[int] = None,
    ) -> Optional[TradeResult]:
        """Copy a buy of token by wallet. Returns None when a gate stopped it."""
        wallet = normalize_address(wallet)
        token = normalize_address(token)
        detected_at_ms = detected_at_ms or _now_ms()
        amount_usd = self._settings.strategy.trade_amount_usd

        if not self._state.try_start_cooldown(wallet):
            self._logger.info(
                "buy_skipped_cooldown",
                wallet_masked=mask_address(wallet),
                token=token,
                whale_tx_hash=whale_tx_hash,
                cooldown_remaining_seconds=round(self._state.cooldown_remaining(wallet), 2),
            )
            return None

        if not await self._balance_guard(wallet, token, whale_tx_hash, amount_usd):
            return None

        trade_id = self._journal_insert(
            "BUY", wallet, NATIVE_TOKEN_ADDRESS, token, amount_usd, whale_tx_hash, detected_at_ms
        )
        result = await self._executor.execute_buy(token, amount_usd)
        delay_ms = (result.confirmed_at_ms - detected_at_ms) if result.confirmed_at_ms else None
        self._journal_finish(trade_id, result, delay_ms)

        if result.succeeded and result.tx_hash:
            await self._ledger.add_lot(
                wallet,
                Lot.create(token, whale_tx_hash, result.tx_hash, Decimal(str(amount_usd))),
            )
            self._emit(
                BuyExecutedEvent(
                    whale_wallet=wallet,
                    token=token,
                    whale_tx_hash=whale_tx_hash,
                    my_tx_hash=result.tx_hash,
                    amount_usd=amount_usd,
                    sell_amount_native=result.sell_amount_native,
                    native_price_usd=result.native_price_usd or 0.0,
                    buy_amount_raw=result.buy_amount_raw,
                    block_number=result.block_number,
                    gas_used=result.gas_used,
                    gas_price_gwei=result.gas_price_gwei,
                    gas_cost_native=result.gas_cost_native,
                    delay_ms=delay_ms,
                )
            )
        else:
            self._emit(
                BuyFailedEvent(
                    whale_wallet=wallet,
                    token=token,
                    whale_tx_hash=whale_tx_hash,
                    amount_usd=amount_usd,
                    error_message=result.error,
                    my_tx_hash=result.tx_hash,
                )
            )
        return result

    async def _balance_guard(
        self, wallet: str, token: str, whale_tx_hash: str, amount_usd: float
    ) -> bool:
        """True if native balance covers amount_usd plus the buffer."""
        price = await self._prices.get_usd_price()
        required = (amount_usd / price) * (1 + self._settings.strategy.balance_buffer_pct / 100)
        try:
            balance_wei = await self._rpc.get_balance(self.my_wallet)
        except CopyTradingError as e:
            self._logger.warning(
                "balance_check_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False
        balance = float(Web3.from_wei(balance_wei, "ether"))

        if balance >= required:
            if self._state.resume():
                self._logger.info("balance_guard_resumed", balance_native=balance)
            return True

        entered = self._state.pause()
        self._logger.warning(
            "buy_skipped_insufficient_balance",
            wallet_masked=mask_address(wallet),
            balance_native=balance,
            required_native=required,
            paused_transition=entered,
        )
        if entered or self._settings.strategy.repeat_balance_notifications:
            self._emit(
                InsufficientBalanceEvent(
                    whale_wallet=wallet,
                    token=token,
                    whale_tx_hash=whale_tx_hash,
                    balance_native=balance,
                    required_native=required,
                    amount_usd=amount_usd,
                    native_price_usd=price,
                )
            )
        return False

    # Sell path

    async def consider_sell(
        self,
        wallet: str,
        token: Optional[str],
        whale_tx_hash: str,
        *,
        detected_at_ms: Optional[int] = None,
    ) -> list[TradeResult]:
        """Mirror a sale of token by wallet across our open lots, oldest first."""
        wallet = normalize_address(wallet)
        detected_at_ms = detected_at_ms or _now_ms()
        if token is None:
            self._logger.warning(
                "sell_detected_unknown_token",
                wallet_masked=mask_address(wallet),
                whale_tx_hash=whale_tx_hash,
            )
            self._emit(SellDetectedEvent(whale_wallet=wallet, whale_tx_hash=whale_tx_hash))
            return []

        token = normalize_address(token)
        open_lots = await self._ledger.lots_for_token(wallet, token)
        self._logger.info(
            "sell_detected",
            wallet_masked=mask_address(wallet),
            token=token,
            open_lots=len(open_lots),
        )
        self._emit(
            SellDetectedEvent(
                whale_wallet=wallet,
                whale_tx_hash=whale_tx_hash,
                token=token,
                open_lots=len(open_lots),
            )
        )

        results: list[TradeResult] = []
        # one sale of a token at a time, across whale transactions too
        async with self._sell_locks.setdefault((wallet, token), asyncio.Lock()):
            for _ in range(len(open_lots)):
                lots = await self._ledger.lots_for_token(wallet, token)
                if not lots:
                    break
                fraction = 1 / len(lots)
                result = await self._sell_lot(wallet, token, lots[0], fraction, whale_tx_hash, detected_at_ms)
                results.append(result)
                if result.status == "failed":
                    # later lots would re-sell the same balance slice
                    break
        return results

    async def _sell_lot(
        self,
        wallet: str,
        token: str,
        lot: Lot,
        fraction: float,
        whale_tx_hash: str,
        detected_at_ms: int,
    ) -> TradeResult:
        trade_id = self._journal_insert(
            "SELL", wallet, token, NATIVE_TOKEN_ADDRESS, float(lot.amount_usd), whale_tx_hash, detected_at_ms
        )
        result = await self._executor.execute_sell(token, fraction)

        if result.status == "failed":
            self._journal_finish(trade_id, result, None)
            self._emit(
                SellFailedEvent(
                    whale_wallet=wallet,
                    token=token,
                    whale_tx_hash=whale_tx_hash,
                    lot_tx_hash=lot.my_tx_hash,
                    attempts=result.attempts,
                    error_message=result.error,
                )
            )
            return result

        if result.status == "skipped" and self._journal is not None:
            self._journal.skip_trade(trade_id, result.skip_reason or "skipped")
        else:
            delay_ms = (result.confirmed_at_ms - detected_at_ms) if result.confirmed_at_ms else None
            self._journal_finish(trade_id, result, delay_ms)

        closed = await self._ledger.pop_oldest_lot(wallet, token) or lot
        remaining = len(await self._ledger.lots_for_token(wallet, token))
        self._emit(
            SellExecutedEvent(
                whale_wallet=wallet,
                token=token,
                whale_tx_hash=whale_tx_hash,
                lot_tx_hash=closed.my_tx_hash,
                skipped=result.status == "skipped",
                my_tx_hash=result.tx_hash,
                fraction=fraction,
                received_native=result.sell_amount_native,
                native_price_usd=result.native_price_usd,
                lot_amount_usd=float(closed.amount_usd),
                remaining_lots=remaining,
                gas_cost_native=result.gas_cost_native,
            )
        )
        return result

    # Journal

    def _journal_insert(
        self,
        side: TradeSide,
        wallet: str,
        token_in: str,
        token_out: str,
        amount_usd: float,
        whale_tx_hash: str,
        detected_at_ms: int,
    ) -> Optional[int]:
        if self._journal is None:
            return None
        return self._journal.insert_trade(
            TradeRecord(
                whale_wallet=wallet,
                my_wallet=self.my_wallet,
                side=side,
                token_in=token_in.lower(),
                token_out=token_out.lower(),
                amount_usd=amount_usd,
                sell_amount_native=0.0,
                detected_at_ms=detected_at_ms,
                executed_at_ms=_now_ms(),
                whale_tx_hash=whale_tx_hash,
            )
        )

    def _journal_finish(self, trade_id: Optional[int], result: TradeResult, delay_ms: Optional[int]) -> None:
        if self._journal is None:
            return
        self._journal.update_trade_confirmed(
            trade_id,
            status=result.status,
            confirmed_at_ms=result.confirmed_at_ms,
            delay_ms=delay_ms,
            block_number=result.block_number,
            gas_used=result.gas_used,
            gas_price_gwei=result.gas_price_gwei,
            gas_cost_native=result.gas_cost_native,
            my_tx_hash=result.tx_hash,
            buy_amount_raw=result.buy_amount_raw,
            sell_amount_native=result.sell_amount_native,
            error_msg=result.error,
        )
