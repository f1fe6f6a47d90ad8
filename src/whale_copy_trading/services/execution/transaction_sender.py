# -*- coding: utf-8 -*-
"""Sign, submit and confirm transactions for the managed account."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

import structlog
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from whale_copy_trading.exceptions import (
    ApiRequestError,
    ConfirmationTimeoutError,
    MissingRequiredConfigError,
    RpcError,
    TransactionPendingError,
)
from whale_copy_trading.services.execution.nonce_sequencer import is_nonce_error
from whale_copy_trading.utils.retry import poll_until

if TYPE_CHECKING:
    from whale_copy_trading.clients.rpc_client import RpcClient
    from whale_copy_trading.config import Settings
    from whale_copy_trading.services.execution.nonce_sequencer import NonceSequencer

SELECTOR_APPROVE = "0x095ea7b3"

_KNOWN_TX_MARKERS = ("already known", "known transaction", "already imported")


def _int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    s = str(value)
    return int(s, 16) if s.startswith("0x") else int(s)


@dataclass(frozen=True, slots=True)
class ConfirmedTransaction:
    """A mined transaction and the receipt fields the journal needs."""

    tx_hash: str
    success: bool
    block_number: Optional[int]
    gas_used: Optional[int]
    gas_price_gwei: Optional[float]
    gas_cost_native: Optional[float]

    @classmethod
    def from_receipt(cls, tx_hash: str, receipt: dict[str, Any]) -> ConfirmedTransaction:
        gas_used = _int(receipt.get("gasUsed")) or None
        gas_price_wei = _int(receipt.get("effectiveGasPrice")) or None
        gas_price_gwei = gas_price_wei / 1e9 if gas_price_wei else None
        gas_cost = (gas_used * gas_price_wei) / 1e18 if gas_used and gas_price_wei else None
        block = receipt.get("blockNumber")
        return cls(
            tx_hash=tx_hash,
            success=_int(receipt.get("status")) == 1,
            block_number=_int(block) if block is not None else None,
            gas_used=gas_used,
            gas_price_gwei=gas_price_gwei,
            gas_cost_native=gas_cost,
        )


class TransactionSender:
    """Builds, signs (eth-account) and broadcasts transactions, then waits for one confirmation.

    Every submission takes its nonce from the NonceSequencer. A nonce taken
    by a transaction that never reached the node is released with reset().
    """

    def __init__(
        self,
        rpc_client: RpcClient,
        nonce_sequencer: NonceSequencer,
        settings: Settings,
        *,
        account: Optional[LocalAccount] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._rpc = rpc_client
        self._nonces = nonce_sequencer
        self._settings = settings
        self._account = account
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def account(self) -> LocalAccount:
        if self._account is None:
            key = self._settings.wallet.private_key
            if not key:
                raise MissingRequiredConfigError("WALLET__PRIVATE_KEY")
            self._account = Account.from_key(key)
        return self._account

    @property
    def address(self) -> str:
        return self._settings.wallet.address.lower()

    def _gas_limit(self, gas: Any) -> int:
        strategy = self._settings.strategy
        base = _int(gas, strategy.default_gas_limit)
        return int(math.ceil(base * strategy.gas_limit_multiplier))

    async def send(self, tx: dict[str, Any]) -> ConfirmedTransaction:
        """Submit an aggregator transaction object ({to, data, value, gas, gasPrice}) and wait for it.

        The hash is computed locally from the signed payload. A submission error
        after which the node already holds that hash counts as submitted. A
        rejected submission releases its nonce.

        Raises:
            RpcError / ApiRequestError: The node rejected the transaction.
            TransactionPendingError: The transaction may be in the mempool but
                its outcome is unknown (ConfirmationTimeoutError included).
        """
        account = self.account
        gas_price = _int(tx.get("gasPrice")) or await self._rpc.gas_price()
        payload = {
            "to": Web3.to_checksum_address(str(tx["to"])),
            "data": str(tx.get("data") or "0x"),
            "value": _int(tx.get("value")),
            "gas": self._gas_limit(tx.get("gas")),
            "gasPrice": gas_price,
            "chainId": self._settings.chain.chain_id,
        }
        nonce = await self._nonces.next_nonce()
        try:
            signed = account.sign_transaction({**payload, "nonce": nonce})
        except Exception:
            self._nonces.reset()
            raise
        tx_hash = Web3.to_hex(signed.hash).lower()
        try:
            await self._rpc.send_raw_transaction(Web3.to_hex(signed.raw_transaction))
        except (RpcError, ApiRequestError) as e:
            if not await self._known_to_node(tx_hash, e):
                self._nonces.reset()
                raise
            self._logger.warning(
                "tx_submit_error_but_known",
                tx_hash=tx_hash,
                nonce=nonce,
                error_message=str(e),
            )
        self._logger.info(
            "tx_submitted",
            tx_hash=tx_hash,
            nonce=nonce,
            gas_limit=payload["gas"],
            to=payload["to"],
        )
        return await self.wait_for_receipt(tx_hash)

    async def _known_to_node(self, tx_hash: str, error: RpcError | ApiRequestError) -> bool:
        """True if a failed eth_sendRawTransaction still left tx_hash with the node.

        A retried POST whose first attempt was accepted comes back as "already
        known" or as a nonce error. Transport failures are ambiguous, so the node
        is asked directly.
        """
        text = f"{error} {getattr(error, 'body', None) or ''}".lower()
        if any(marker in text for marker in _KNOWN_TX_MARKERS):
            return True
        if isinstance(error, RpcError) and not is_nonce_error(error):
            return False
        try:
            found = await self._rpc.get_transaction(tx_hash)
        except (RpcError, ApiRequestError) as e:
            raise TransactionPendingError(
                f"submission of {tx_hash} failed ambiguously: {error}", tx_hash=tx_hash
            ) from e
        return found is not None

    async def approve(self, token: str, spender: str, amount: int) -> ConfirmedTransaction:
        """Submit ERC-20 approve(spender, amount) and wait for it."""
        data = (
            SELECTOR_APPROVE
            + "0" * 24
            + spender.lower().removeprefix("0x")
            + format(amount, "064x")
        )
        try:
            gas = await self._rpc.estimate_gas({"from": self.address, "to": token, "data": data})
        except (RpcError, ApiRequestError) as e:
            self._logger.debug("approve_gas_estimate_failed", token=token, error_message=str(e))
            gas = None
        self._logger.info("approve_submitting", token=token, spender=spender, amount=str(amount))
        return await self.send({"to": token, "data": data, "value": 0, "gas": gas})

    async def wait_for_receipt(self, tx_hash: str) -> ConfirmedTransaction:
        chain = self._settings.chain
        attempts = max(1, int(math.ceil(chain.confirmation_timeout_seconds / chain.confirmation_poll_seconds)))

        async def fetch() -> dict[str, Any] | None:
            try:
                return await self._rpc.get_transaction_receipt(tx_hash)
            except (RpcError, ApiRequestError) as e:
                self._logger.debug("tx_receipt_fetch_failed", tx_hash=tx_hash, error_message=str(e))
                return None

        receipt = await poll_until(fetch, max_attempts=attempts, interval=chain.confirmation_poll_seconds)
        if receipt is None:
            raise ConfirmationTimeoutError(tx_hash, chain.confirmation_timeout_seconds)
        confirmed = ConfirmedTransaction.from_receipt(tx_hash, receipt)
        self._logger.info(
            "tx_confirmed",
            tx_hash=tx_hash,
            success=confirmed.success,
            block_number=confirmed.block_number,
            gas_used=confirmed.gas_used,
        )
        return confirmed
