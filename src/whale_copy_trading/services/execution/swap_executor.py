# -*- coding: utf-8 -*-
"""Quote -> submit -> confirm cycles for copied buys and sells (0x allowance-holder)."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

import structlog
from web3 import Web3

from whale_copy_trading.clients.aggregator_client import NATIVE_TOKEN_ADDRESS, needs_allowance
from whale_copy_trading.exceptions import ApiRequestError, CopyTradingError, TransactionPendingError
from whale_copy_trading.services.execution.dto import TradeResult
from whale_copy_trading.utils.retry import retry_async

if TYPE_CHECKING:
    from whale_copy_trading.clients.aggregator_client import ZeroExClient
    from whale_copy_trading.clients.price_client import NativePriceClient
    from whale_copy_trading.clients.rpc_client import RpcClient
    from whale_copy_trading.config import Settings
    from whale_copy_trading.services.execution.transaction_sender import (
        ConfirmedTransaction,
        TransactionSender,
    )

_FRACTION_SCALE = 1_000_000


def _now_ms() -> int:
    return int(time.time() * 1000)


def _error_text(e: Exception) -> str:
    if isinstance(e, ApiRequestError) and e.body:
        return e.body[:500]
    return str(e)


def native_to_wei(amount: float) -> int:
    """Native amount (8 decimal places kept) to wei."""
    return int(Web3.to_wei(Decimal(f"{amount:.8f}"), "ether"))


def fraction_of(balance: int, fraction: float) -> int:
    """fraction of a raw token balance, exact at fraction >= 1."""
    if fraction >= 1.0:
        return balance
    return balance * int(fraction * _FRACTION_SCALE) // _FRACTION_SCALE


class SwapExecutor:
    """Executes the managed account's side of a copy trade.

    Never raises for quote, submission or confirmation problems: every outcome
    is a TradeResult. Buys are attempted once. Sells retry on revert and request
    failure up to strategy.sell_retries times, but never once a transaction may
    be pending (TransactionPendingError).
    """

    def __init__(
        self,
        aggregator: ZeroExClient,
        rpc_client: RpcClient,
        sender: TransactionSender,
        price_client: NativePriceClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._aggregator = aggregator
        self._rpc = rpc_client
        self._sender = sender
        self._prices = price_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def taker(self) -> str:
        return self._settings.wallet.address.lower()

    def _metrics(self, confirmed: ConfirmedTransaction) -> dict[str, Any]:
        return {
            "tx_hash": confirmed.tx_hash,
            "block_number": confirmed.block_number,
            "gas_used": confirmed.gas_used,
            "gas_price_gwei": confirmed.gas_price_gwei,
            "gas_cost_native": confirmed.gas_cost_native,
            "confirmed_at_ms": _now_ms(),
        }

    async def execute_buy(self, token_out: str, amount_usd: float) -> TradeResult:
        """Spend amount_usd worth of native currency on token_out."""
        price = await self._prices.get_usd_price()
        native_amount = amount_usd / price
        sell_amount = native_to_wei(native_amount)
        base = {"sell_amount_native": native_amount, "native_price_usd": price}
        self._logger.info(
            "buy_quoting",
            token=token_out,
            amount_usd=amount_usd,
            sell_amount_native=native_amount,
        )
        try:
            quote_check = await self._aggregator.get_price(
                NATIVE_TOKEN_ADDRESS, token_out, sell_amount, self.taker
            )
            if not quote_check.get("liquidityAvailable"):
                self._logger.warning("buy_no_liquidity", token=token_out)
                return TradeResult.failed("no liquidity available", **base)

            quote = await self._aggregator.get_quote(
                NATIVE_TOKEN_ADDRESS,
                token_out,
                sell_amount,
                self.taker,
                slippage_pct=self._settings.aggregator.buy_slippage_pct,
            )
            tx = quote.get("transaction")
            if not isinstance(tx, dict):
                return TradeResult.failed("aggregator returned no transaction", **base)

            confirmed = await self._sender.send(tx)
        except TransactionPendingError as e:
            self._logger.error(
                "buy_outcome_unknown",
                token=token_out,
                tx_hash=e.tx_hash,
                error_message=str(e),
            )
            return TradeResult.failed(str(e), tx_hash=e.tx_hash, **base)
        except CopyTradingError as e:
            self._logger.warning(
                "buy_execution_failed",
                token=token_out,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return TradeResult.failed(_error_text(e), **base)
        except Exception as e:
            self._logger.exception(
                "buy_execution_exception",
                token=token_out,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return TradeResult.failed(str(e), **base)

        if not confirmed.success:
            self._logger.error("buy_reverted", token=token_out, tx_hash=confirmed.tx_hash)
            return TradeResult.failed("transaction reverted", **base, **self._metrics(confirmed))

        buy_amount = quote.get("buyAmount")
        self._logger.info(
            "buy_confirmed",
            token=token_out,
            tx_hash=confirmed.tx_hash,
            block_number=confirmed.block_number,
            buy_amount_raw=buy_amount,
        )
        return TradeResult(
            status="success",
            buy_amount_raw=str(buy_amount) if buy_amount is not None else None,
            **base,
            **self._metrics(confirmed),
        )

    async def execute_sell(self, token: str, fraction: float = 1.0) -> TradeResult:
        """Sell fraction of the current token balance for native currency.

        A zero balance (or a fraction that rounds to zero) is "skipped" before
        any quote is requested.
        """
        price = await self._prices.get_usd_price()
        try:
            total = await self._rpc.erc20_balance_of(token, self.taker)
        except CopyTradingError as e:
            self._logger.warning("sell_balance_lookup_failed", token=token, error_message=str(e))
            return TradeResult.failed(_error_text(e), native_price_usd=price)

        if total == 0:
            self._logger.info("sell_skipped_no_balance", token=token)
            return TradeResult.skipped("no_balance", native_price_usd=price)
        amount = fraction_of(total, fraction)
        if amount == 0:
            self._logger.info("sell_skipped_fraction_rounds_to_zero", token=token, fraction=fraction)
            return TradeResult.skipped("no_balance", native_price_usd=price)

        decimals = await self._decimals(token)
        self._logger.info(
            "sell_quoting",
            token=token,
            fraction=fraction,
            amount_tokens=amount / (10**decimals),
        )

        strategy = self._settings.strategy

        def log_retry(attempt: int, result: TradeResult) -> None:
            self._logger.warning(
                "sell_attempt_failed_retrying",
                token=token,
                attempt=attempt,
                max_attempts=strategy.sell_retries,
                error_message=result.error,
                retry_delay_seconds=strategy.sell_retry_delay_seconds,
            )

        result = await retry_async(
            lambda attempt: self._sell_attempt(token, amount, total, price, attempt),
            max_attempts=strategy.sell_retries,
            delay=strategy.sell_retry_delay_seconds,
            should_retry=lambda r: r.status == "failed" and r.retryable,
            on_retry=log_retry,
        )
        if result.status == "failed":
            self._logger.error(
                "sell_failed",
                token=token,
                attempts=result.attempts,
                error_message=result.error,
            )
        return result

    async def _decimals(self, token: str) -> int:
        try:
            return await self._rpc.erc20_decimals(token)
        except CopyTradingError:
            return 18

    async def _sell_attempt(
        self, token: str, amount: int, total: int, price: float, attempt: int
    ) -> TradeResult:
        base: dict[str, Any] = {"native_price_usd": price, "attempts": attempt}
        try:
            quote_check = await self._aggregator.get_price(
                token, NATIVE_TOKEN_ADDRESS, amount, self.taker
            )
            if needs_allowance(quote_check):
                if not await self._ensure_allowance(token, total):
                    return TradeResult.failed("token approval failed", retryable=False, **base)

            quote = await self._aggregator.get_quote(
                token,
                NATIVE_TOKEN_ADDRESS,
                amount,
                self.taker,
                slippage_pct=self._settings.aggregator.sell_slippage_pct,
            )
            tx = quote.get("transaction")
            if not isinstance(tx, dict):
                return TradeResult.failed("aggregator returned no transaction", retryable=False, **base)

            confirmed = await self._sender.send(tx)
        except TransactionPendingError as e:
            # may still be mined: never resubmit
            self._logger.error(
                "sell_outcome_unknown",
                token=token,
                attempt=attempt,
                tx_hash=e.tx_hash,
                error_message=str(e),
            )
            return TradeResult.failed(str(e), tx_hash=e.tx_hash, retryable=False, **base)
        except CopyTradingError as e:
            return TradeResult.failed(_error_text(e), **base)
        except Exception as e:
            self._logger.exception(
                "sell_attempt_exception",
                token=token,
                attempt=attempt,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return TradeResult.failed(str(e), retryable=False, **base)

        if not confirmed.success:
            return TradeResult.failed("transaction reverted", **base, **self._metrics(confirmed))

        received = int(quote.get("buyAmount") or 0) / 1e18
        self._logger.info(
            "sell_confirmed",
            token=token,
            tx_hash=confirmed.tx_hash,
            block_number=confirmed.block_number,
            received_native=received,
        )
        return TradeResult(status="success", sell_amount_native=received, **base, **self._metrics(confirmed))

    async def _ensure_allowance(self, token: str, amount: int) -> bool:
        spender = self._settings.aggregator.allowance_holder
        try:
            current = await self._rpc.erc20_allowance(token, self.taker, spender)
            if current >= amount:
                return True
            confirmed = await self._sender.approve(token, spender, amount)
        except CopyTradingError as e:
            self._logger.error("approve_failed", token=token, error_message=str(e))
            return False
        if not confirmed.success:
            self._logger.error("approve_reverted", token=token, tx_hash=confirmed.tx_hash)
            return False
        self._logger.info("approve_confirmed", token=token, tx_hash=confirmed.tx_hash)
        await asyncio.sleep(self._settings.aggregator.approval_settle_seconds)
        return True
