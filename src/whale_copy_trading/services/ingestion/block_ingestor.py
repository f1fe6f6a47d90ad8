# -*- coding: utf-8 -*-
"""Chain event ingestion: newHeads subscription -> full blocks -> target-wallet transactions."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog

from whale_copy_trading.exceptions import CopyTradingError
from whale_copy_trading.models.observed_transaction import ObservedTransaction
from whale_copy_trading.utils.validation import is_hex_address, mask_address

if TYPE_CHECKING:
    from whale_copy_trading.clients.block_stream import NewHeadsStream
    from whale_copy_trading.clients.rpc_client import RpcClient
    from whale_copy_trading.config import Settings
    from whale_copy_trading.services.pipeline.handler_group import HandlerGroup
    from whale_copy_trading.services.pipeline.swap_pipeline import SwapPipeline
    from whale_copy_trading.services.resolution.swap_resolver import SwapResolver


class BlockIngestor:
    """Follows new blocks and hands target-wallet transactions to the pipeline.

    run() reconnects forever after a subscription error or closure, waiting
    chain.reconnect_delay_seconds in between; it only returns by cancellation.
    Handlers are spawned in block order and never awaited here.
    """

    def __init__(
        self,
        settings: Settings,
        stream: NewHeadsStream,
        rpc_client: RpcClient,
        resolver: SwapResolver,
        pipeline: SwapPipeline,
        handler_group: HandlerGroup,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._settings = settings
        self._stream = stream
        self._rpc = rpc_client
        self._resolver = resolver
        self._pipeline = pipeline
        self._handlers = handler_group
        invalid = [w for w in settings.tracking.target_wallets if not is_hex_address(w)]
        if invalid:
            raise ValueError(f"target wallets must be valid 0x addresses: {invalid}")
        self._targets = frozenset(settings.tracking.target_wallets)
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self.blocks_processed = 0

    async def run(self) -> None:
        delay = self._settings.chain.reconnect_delay_seconds
        self._logger.info(
            "ingestor_started",
            target_wallets=[mask_address(w) for w in sorted(self._targets)],
        )
        try:
            while True:
                try:
                    async for block_hash in self._stream.heads():
                        await self.process_block(block_hash)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    self._logger.warning(
                        "ingestor_subscription_lost",
                        error_type=type(e).__name__,
                        error_message=str(e),
                        reconnect_delay_seconds=delay,
                    )
                await asyncio.sleep(delay)
                self._logger.info("ingestor_reconnecting")
        except asyncio.CancelledError:
            self._logger.info("ingestor_stopped", blocks_processed=self.blocks_processed)
            raise

    async def process_block(self, block_hash: str) -> int:
        """Fetch one block and dispatch its target-wallet transactions.

        Returns:
            Number of transactions handed to the pipeline (0 when the block
            could not be fetched).
        """
        try:
            block = await self._rpc.get_block_by_hash(block_hash)
        except CopyTradingError as e:
            self._logger.warning(
                "ingestor_block_fetch_failed",
                block_hash=block_hash,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return 0
        if block is None:
            self._logger.warning("ingestor_block_not_found", block_hash=block_hash)
            return 0

        self.blocks_processed += 1
        dispatched = 0
        for raw in block.get("transactions") or []:
            if not isinstance(raw, dict):
                continue
            tx_hash = str(raw.get("hash") or "").lower()
            if tx_hash and self._resolver.is_awaiting(tx_hash):
                self._resolver.notify_included(tx_hash)
            sender = str(raw.get("from") or "").lower()
            if sender not in self._targets:
                continue
            tx = ObservedTransaction.from_rpc(raw)
            self._logger.info(
                "ingestor_target_transaction",
                tx_hash=tx.hash,
                wallet_masked=mask_address(tx.sender),
                block_number=tx.block_number,
            )
            self._handlers.spawn(self._pipeline.handle(tx), name=tx.hash)
            dispatched += 1
        return dispatched
