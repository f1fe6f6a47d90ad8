# -*- coding: utf-8 -*-
"""Tests for RpcClient."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import AsyncMock

import pytest

from whale_copy_trading.clients.rpc_client import SELECTOR_BALANCE_OF, RpcClient
from whale_copy_trading.exceptions import RpcError


def _client(settings: SimpleNamespace, response: Any) -> tuple[RpcClient, AsyncMock]:
    post = AsyncMock(return_value=response)
    http = SimpleNamespace(post=post)
    return RpcClient(cast(Any, http), cast(Any, settings)), post


async def test_call_posts_jsonrpc_payload(settings: SimpleNamespace) -> None:
    client, post = _client(settings, {"jsonrpc": "2.0", "id": 1, "result": "0x10"})

    assert await client.get_balance("0xabc") == 16

    url = post.await_args.args[0]
    payload = post.await_args.kwargs["json"]
    assert url == "https://node.example/rpc"
    assert payload["method"] == "eth_getBalance"
    assert payload["params"] == ["0xabc", "latest"]


async def test_error_object_raises_rpc_error(settings: SimpleNamespace) -> None:
    client, _ = _client(settings, {"error": {"code": -32000, "message": "nonce too low"}})

    with pytest.raises(RpcError) as exc_info:
        await client.send_raw_transaction("0xdead")

    assert exc_info.value.code == -32000
    assert exc_info.value.method == "eth_sendRawTransaction"
    assert "nonce too low" in str(exc_info.value)


async def test_non_dict_response_is_an_error(settings: SimpleNamespace) -> None:
    client, _ = _client(settings, ["unexpected"])

    with pytest.raises(RpcError):
        await client.gas_price()


async def test_missing_receipt_is_none(settings: SimpleNamespace) -> None:
    client, _ = _client(settings, {"result": None})

    assert await client.get_transaction_receipt("0x" + "1" * 64) is None


async def test_get_transaction_by_hash(settings: SimpleNamespace) -> None:
    client, post = _client(settings, {"result": {"hash": "0x" + "1" * 64, "blockNumber": None}})

    tx = await client.get_transaction("0x" + "1" * 64)

    assert tx == {"hash": "0x" + "1" * 64, "blockNumber": None}
    assert post.await_args.kwargs["json"]["method"] == "eth_getTransactionByHash"


async def test_erc20_balance_pads_owner(settings: SimpleNamespace, my_wallet: str, token: str) -> None:
    client, post = _client(settings, {"result": "0x" + format(5000, "064x")})

    assert await client.erc20_balance_of(token, my_wallet) == 5000

    call_object, block = post.await_args.kwargs["json"]["params"]
    assert block == "latest"
    assert call_object["to"] == token
    assert call_object["data"] == SELECTOR_BALANCE_OF + "0" * 24 + my_wallet[2:]


async def test_empty_call_result_reads_as_zero(settings: SimpleNamespace, token: str) -> None:
    client, _ = _client(settings, {"result": "0x"})

    assert await client.erc20_decimals(token) == 0
