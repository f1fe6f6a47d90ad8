# -*- coding: utf-8 -*-
"""Unit tests for TransactionSender (signing, gas limit, nonce reset, confirmation)."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_account import Account
from web3 import Web3

from whale_copy_trading.exceptions import (
    ApiRequestError,
    ConfirmationTimeoutError,
    MissingRequiredConfigError,
    RpcError,
    TransactionPendingError,
)
from whale_copy_trading.services.execution.transaction_sender import (
    ConfirmedTransaction,
    TransactionSender,
)

TEST_KEY = "0x" + "11" * 32
ROUTER = "0x0000000000001ff3684f28c67538d4d072c22734"
SENT_HASH = "0x" + "d" * 64
RECEIPT = {
    "status": "0x1",
    "blockNumber": "0x10",
    "gasUsed": "0x186a0",
    "effectiveGasPrice": "0x3b9aca00",
}


def _build(settings: SimpleNamespace, *, with_account: bool = True) -> tuple[TransactionSender, SimpleNamespace]:
    deps = SimpleNamespace(
        rpc=SimpleNamespace(
            gas_price=AsyncMock(return_value=1_000_000),
            send_raw_transaction=AsyncMock(return_value=SENT_HASH),
            get_transaction_receipt=AsyncMock(return_value=RECEIPT),
            estimate_gas=AsyncMock(return_value=50_000),
            get_transaction=AsyncMock(return_value=None),
        ),
        nonces=SimpleNamespace(next_nonce=AsyncMock(return_value=3), reset=MagicMock()),
    )
    sender = TransactionSender(
        cast(Any, deps.rpc),
        cast(Any, deps.nonces),
        cast(Any, settings),
        account=Account.from_key(TEST_KEY) if with_account else None,
    )
    return sender, deps


def test_confirmed_transaction_from_receipt_computes_gas_cost() -> None:
    confirmed = ConfirmedTransaction.from_receipt(SENT_HASH, RECEIPT)

    assert confirmed.success is True
    assert confirmed.block_number == 16
    assert confirmed.gas_used == 100_000
    assert confirmed.gas_price_gwei == pytest.approx(1.0)
    assert confirmed.gas_cost_native == pytest.approx(0.0001)


def test_failed_status_is_not_success() -> None:
    assert ConfirmedTransaction.from_receipt(SENT_HASH, {"status": "0x0"}).success is False


async def test_send_signs_with_sequenced_nonce_and_waits(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)

    confirmed = await sender.send({"to": ROUTER, "data": "0xabcd", "value": "0", "gas": "200000"})

    raw = deps.rpc.send_raw_transaction.await_args.args[0]
    assert confirmed.tx_hash == Web3.to_hex(Web3.keccak(hexstr=raw))
    assert confirmed.success is True
    deps.nonces.next_nonce.assert_awaited_once()
    deps.rpc.gas_price.assert_awaited_once()
    deps.rpc.get_transaction_receipt.assert_awaited_once_with(confirmed.tx_hash)


def test_gas_limit_applies_multiplier_and_default(settings: SimpleNamespace) -> None:
    sender, _ = _build(settings)

    assert sender._gas_limit("200000") == 260_000
    assert sender._gas_limit(None) == 650_000


async def test_nonce_error_resets_sequencer_and_propagates(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.send_raw_transaction.side_effect = RpcError("RPC error: nonce too low", method="eth_sendRawTransaction")

    with pytest.raises(RpcError):
        await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    deps.nonces.reset.assert_called_once()
    deps.rpc.get_transaction.assert_awaited_once()
    deps.rpc.get_transaction_receipt.assert_not_awaited()


async def test_rejected_submission_releases_nonce(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.send_raw_transaction.side_effect = RpcError("RPC error: insufficient funds")

    with pytest.raises(RpcError):
        await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    deps.nonces.reset.assert_called_once()
    deps.rpc.get_transaction.assert_not_awaited()


async def test_wait_for_receipt_times_out(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.get_transaction_receipt.return_value = None

    with pytest.raises(ConfirmationTimeoutError):
        await sender.wait_for_receipt(SENT_HASH)


async def test_approve_encodes_spender_and_amount(settings: SimpleNamespace, token: str) -> None:
    sender, deps = _build(settings)
    sender.send = AsyncMock(return_value=ConfirmedTransaction.from_receipt(SENT_HASH, RECEIPT))  # type: ignore[method-assign]

    await sender.approve(token, ROUTER, 255)

    tx = sender.send.await_args.args[0]
    assert tx["to"] == token
    assert tx["data"] == "0x095ea7b3" + "0" * 24 + ROUTER[2:] + "0" * 62 + "ff"
    assert tx["gas"] == 50_000


def test_missing_private_key_raises_on_first_use(settings: SimpleNamespace) -> None:
    sender, _ = _build(settings, with_account=False)

    with pytest.raises(MissingRequiredConfigError):
        _ = sender.account


async def test_already_known_counts_as_submitted(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.send_raw_transaction.side_effect = RpcError("RPC error: already known", method="eth_sendRawTransaction")

    confirmed = await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    assert confirmed.success is True
    deps.nonces.reset.assert_not_called()
    deps.rpc.send_raw_transaction.assert_awaited_once()
    deps.rpc.get_transaction_receipt.assert_awaited_once_with(confirmed.tx_hash)


async def test_nonce_error_for_own_accepted_transaction_waits_for_it(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.send_raw_transaction.side_effect = RpcError("RPC error: nonce too low", method="eth_sendRawTransaction")
    deps.rpc.get_transaction.return_value = {"hash": "0x" + "a" * 64}

    confirmed = await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    assert confirmed.success is True
    deps.nonces.reset.assert_not_called()
    deps.rpc.get_transaction.assert_awaited_once_with(confirmed.tx_hash)


async def test_transport_failure_with_unknown_outcome_is_pending(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.send_raw_transaction.side_effect = ApiRequestError("POST failed after 3 attempts", status_code=502)
    deps.rpc.get_transaction.side_effect = ApiRequestError("POST failed after 3 attempts", status_code=502)

    with pytest.raises(TransactionPendingError) as exc_info:
        await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    raw = deps.rpc.send_raw_transaction.await_args.args[0]
    assert exc_info.value.tx_hash == Web3.to_hex(Web3.keccak(hexstr=raw))
    deps.nonces.reset.assert_not_called()


async def test_transport_failure_for_unknown_transaction_releases_nonce(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.send_raw_transaction.side_effect = ApiRequestError("POST failed after 3 attempts", status_code=502)

    with pytest.raises(ApiRequestError):
        await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    deps.nonces.reset.assert_called_once()


async def test_confirmation_timeout_carries_hash_and_sends_once(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)
    deps.rpc.get_transaction_receipt.return_value = None

    with pytest.raises(ConfirmationTimeoutError) as exc_info:
        await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    raw = deps.rpc.send_raw_transaction.await_args.args[0]
    assert exc_info.value.tx_hash == Web3.to_hex(Web3.keccak(hexstr=raw))
    deps.rpc.send_raw_transaction.assert_awaited_once()
    deps.nonces.reset.assert_not_called()


async def test_invalid_destination_fails_before_taking_nonce(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings)

    with pytest.raises(ValueError):
        await sender.send({"to": "0x1234", "data": "0x", "value": 0})

    deps.nonces.next_nonce.assert_not_awaited()


async def test_missing_private_key_fails_before_taking_nonce(settings: SimpleNamespace) -> None:
    sender, deps = _build(settings, with_account=False)

    with pytest.raises(MissingRequiredConfigError):
        await sender.send({"to": ROUTER, "data": "0x", "value": 0})

    deps.nonces.next_nonce.assert_not_awaited()
    deps.rpc.send_raw_transaction.assert_not_awaited()
