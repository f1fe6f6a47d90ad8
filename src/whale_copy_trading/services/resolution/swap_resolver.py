# -*- coding: utf-8 -*-
"""Swap direction resolution from transaction receipts."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog
from web3 import Web3

from whale_copy_trading.exceptions import ApiRequestError, RpcError
from whale_copy_trading.models.swap import ResolvedSwapDirection
from whale_copy_trading.utils.retry import poll_until
from whale_copy_trading.utils.validation import mask_address, normalize_address, topic_to_address

if TYPE_CHECKING:
    from whale_copy_trading.clients.rpc_client import RpcClient
    from whale_copy_trading.config import Settings

WITHDRAWAL_TOPIC = Web3.to_hex(Web3.keccak(text="Withdrawal(address,uint256)"))
TRANSFER_TOPIC = Web3.to_hex(Web3.keccak(text="Transfer(address,address,uint256)"))


def direction_from_receipt(
    receipt: dict[str, Any], wallet: str, wrapped_native: str
) -> ResolvedSwapDirection:
    """Infer buy/sale and the traded token from receipt logs.

    An unwrap from the wrapped-native contract marks a sale, whose token is the
    last one the wallet sent out. Without an unwrap, the last non-wrapped token
    the wallet received is a buy. Receiving wrapped-native while a token left
    the wallet is a sale of that token. Wrapped-native is never the traded token.
    """
    wallet = normalize_address(wallet)
    wrapped_native = normalize_address(wrapped_native)
    unwrapped = False
    wrapped_received = False
    outbound: list[str] = []
    inbound: list[str] = []

    for log in receipt.get("logs") or []:
        if not isinstance(log, dict):
            continue
        topics = [str(t).lower() for t in (log.get("topics") or [])]
        if not topics:
            continue
        address = normalize_address(log.get("address"))
        if topics[0] == WITHDRAWAL_TOPIC and address == wrapped_native:
            unwrapped = True
            continue
        if topics[0] != TRANSFER_TOPIC or len(topics) < 3:
            continue
        sender = topic_to_address(topics[1])
        receiver = topic_to_address(topics[2])
        if address == wrapped_native:
            wrapped_received = wrapped_received or receiver == wallet
            continue
        if sender == wallet:
            outbound.append(address)
        if receiver == wallet:
            inbound.append(address)

    if unwrapped:
        return ResolvedSwapDirection(is_sale=True, token_traded=outbound[-1] if outbound else None)
    if inbound:
        return ResolvedSwapDirection(is_sale=False, token_traded=inbound[-1])
    if wrapped_received and outbound:
        return ResolvedSwapDirection(is_sale=True, token_traded=outbound[-1])
    return ResolvedSwapDirection(is_sale=False, token_traded=None)


class SwapResolver:
    """Polls for a receipt and derives the swap direction from its logs.

    While a hash is being resolved, notify_included(hash) cuts the current wait
    short; the block ingestor calls it when the transaction shows up in a block.
    """

    def __init__(
        self,
        rpc_client: RpcClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._rpc = rpc_client
        self._settings = settings
        self._awaiting: dict[str, asyncio.Event] = {}
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def is_awaiting(self, tx_hash: str) -> bool:
        return tx_hash.lower() in self._awaiting

    def notify_included(self, tx_hash: str) -> None:
        wake = self._awaiting.get(tx_hash.lower())
        if wake is not None:
            wake.set()

    async def resolve(self, tx_hash: str, wallet: str) -> ResolvedSwapDirection | None:
        """Return the direction, or None when no receipt appears within the allowed poll attempts."""
        tx_hash = tx_hash.lower()
        tr = self._settings.tracking
        wake = self._awaiting.setdefault(tx_hash, asyncio.Event())

        async def fetch() -> dict[str, Any] | None:
            try:
                return await self._rpc.get_transaction_receipt(tx_hash)
            except (RpcError, ApiRequestError) as e:
                self._logger.warning(
                    "resolver_receipt_fetch_failed",
                    tx_hash=tx_hash,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                return None

        try:
            receipt = await poll_until(
                fetch,
                max_attempts=tr.receipt_poll_attempts,
                interval=tr.receipt_poll_interval_seconds,
                wake=wake,
            )
        finally:
            self._awaiting.pop(tx_hash, None)

        if receipt is None:
            self._logger.warning(
                "resolver_receipt_not_found",
                tx_hash=tx_hash,
                attempts=tr.receipt_poll_attempts,
            )
            return None

        direction = direction_from_receipt(receipt, wallet, self._settings.chain.wrapped_native_address)
        self._logger.info(
            "resolver_direction_resolved",
            tx_hash=tx_hash,
            wallet_masked=mask_address(wallet),
            is_sale=direction.is_sale,
            token=direction.token_traded,
        )
        return direction
