# -*- coding: utf-8 -*-
"""Per-transaction pipeline: dedup -> classify -> resolve -> execute."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog

from whale_copy_trading.clients.aggregator_client import NATIVE_TOKEN_ADDRESS
from whale_copy_trading.events.trade_events import SwapDirectionUnknownEvent
from whale_copy_trading.models.seen_transaction import SeenTransaction
from whale_copy_trading.utils.validation import mask_address, normalize_address

if TYPE_CHECKING:
    from whale_copy_trading.config import Settings
    from whale_copy_trading.models.observed_transaction import ObservedTransaction
    from whale_copy_trading.models.swap import SwapClassification
    from whale_copy_trading.persistence.repositories.interfaces.seen_transaction_repository import (
        ISeenTransactionRepository,
    )
    from whale_copy_trading.services.classification.swap_classifier import SwapClassifier
    from whale_copy_trading.services.execution.execution_sequencer import ExecutionSequencer
    from whale_copy_trading.services.resolution.swap_resolver import SwapResolver


class SwapPipeline:
    """Handles one observed target-wallet transaction end to end.

    Each hash is taken at most once (seen repository). Swaps whose output
    token is decoded from the input go straight to the execution sequencer;
    the rest wait resolve_delay_seconds and are resolved from the receipt.
    handle() never raises.
    """

    def __init__(
        self,
        settings: Settings,
        classifier: SwapClassifier,
        resolver: SwapResolver,
        sequencer: ExecutionSequencer,
        seen_transaction_repository: ISeenTransactionRepository,
        event_bus: Optional[Any] = None,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._classifier = classifier
        self._resolver = resolver
        self._sequencer = sequencer
        self._seen_repo = seen_transaction_repository
        self._event_bus = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._exits = {
            normalize_address(settings.chain.wrapped_native_address),
            NATIVE_TOKEN_ADDRESS.lower(),
        }

    async def handle(self, tx: ObservedTransaction) -> None:
        detected_at_ms = int(time.time() * 1000)
        wallet_masked = mask_address(tx.sender)
        try:
            if not await self._seen_repo.try_add(SeenTransaction.create(tx.hash, tx.sender)):
                self._logger.debug("pipeline_duplicate_skipped", tx_hash=tx.hash)
                return

            classification = self._classifier.classify(tx.input_data, tx.value, tx.to)
            if not classification.is_swap:
                self._logger.debug(
                    "pipeline_not_swap",
                    tx_hash=tx.hash,
                    wallet_masked=wallet_masked,
                    selector=classification.selector,
                )
                return

            self._logger.info(
                "pipeline_swap_detected",
                tx_hash=tx.hash,
                wallet_masked=wallet_masked,
                protocol=classification.protocol,
                selector=classification.selector,
                token_in=classification.token_in,
                token_out=classification.token_out,
            )
            if classification.is_decoded:
                await self._handle_decoded(tx, classification, detected_at_ms)
            else:
                await self._handle_deferred(tx, detected_at_ms)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.exception(
                "pipeline_exception",
                tx_hash=tx.hash,
                wallet_masked=wallet_masked,
                error_type=type(e).__name__,
                error_message=str(e),
            )

    async def _handle_decoded(
        self, tx: ObservedTransaction, classification: SwapClassification, detected_at_ms: int
    ) -> None:
        token_out = normalize_address(classification.token_out)
        if token_out in self._exits:
            # swapping a token back to native currency is a sale of token_in
            if classification.token_in:
                await self._sequencer.consider_sell(
                    tx.sender, classification.token_in, tx.hash, detected_at_ms=detected_at_ms
                )
            else:
                await self._handle_deferred(tx, detected_at_ms)
            return
        await self._sequencer.consider_buy(tx.sender, token_out, tx.hash, detected_at_ms=detected_at_ms)

    async def _handle_deferred(self, tx: ObservedTransaction, detected_at_ms: int) -> None:
        delay = self._settings.tracking.resolve_delay_seconds
        if delay > 0:
            await asyncio.sleep(delay)
        direction = await self._resolver.resolve(tx.hash, tx.sender)
        if direction is None:
            self._logger.warning("pipeline_receipt_not_found", tx_hash=tx.hash)
            return

        if direction.is_sale:
            await self._sequencer.consider_sell(
                tx.sender, direction.token_traded, tx.hash, detected_at_ms=detected_at_ms
            )
        elif direction.token_traded is None:
            self._logger.warning(
                "pipeline_direction_unknown",
                tx_hash=tx.hash,
                wallet_masked=mask_address(tx.sender),
            )
            if self._event_bus is not None:
                self._event_bus.dispatch(
                    SwapDirectionUnknownEvent(whale_wallet=tx.sender, whale_tx_hash=tx.hash)
                )
        else:
            await self._sequencer.consider_buy(
                tx.sender, direction.token_traded, tx.hash, detected_at_ms=detected_at_ms
            )
