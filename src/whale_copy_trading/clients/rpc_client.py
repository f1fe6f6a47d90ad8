"""JSON-RPC client for chain reads and raw transaction submission."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, cast

import structlog

from whale_copy_trading.exceptions import RpcError
from whale_copy_trading.utils.validation import mask_address

if TYPE_CHECKING:
    from whale_copy_trading.clients.http import AsyncHttpClient
    from whale_copy_trading.config import Settings

# ERC-20 selectors (bytes4(keccak256(...)))
SELECTOR_DECIMALS = "0x313ce567"
SELECTOR_BALANCE_OF = "0x70a08231"
SELECTOR_ALLOWANCE = "0xdd62ed3e"


def _pad_address(addr: str) -> str:
    """Left-pad an address to a 32-byte ABI word (hex, no 0x)."""
    s = (addr or "").strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    if len(s) != 40:
        raise ValueError(f"Invalid address length: {addr!r}")
    return "0" * 24 + s


def _to_int(raw: Any) -> int:
    if raw is None or raw in ("0x", ""):
        return 0
    return int(str(raw), 16)


class RpcClient:
    """Client for the node's HTTP JSON-RPC endpoint."""

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the RPC client.

        Args:
            http_client: HTTP client for POST requests (JSON-RPC).
            settings: Configuration (uses settings.chain.http_url).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)
        self._request_id = 0

    def _rpc_url(self) -> str:
        return self._settings.chain.http_url.rstrip("/")

    async def call(self, method: str, params: list[Any]) -> Any:
        """Perform a JSON-RPC call and return its result.

        Raises:
            ApiRequestError: If the HTTP request fails after retries.
            RpcError: If the response carries an error object.
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        response = await self._http.post(self._rpc_url(), json=payload)
        if not isinstance(response, dict):
            raise RpcError(f"Unexpected RPC response type: {type(response)}", method=method)
        resp_dict = cast(dict[str, Any], response)
        if "error" in resp_dict and resp_dict["error"] is not None:
            err = resp_dict["error"]
            code: Optional[int] = None
            if isinstance(err, dict):
                err_d = cast(dict[str, Any], err)
                msg = str(err_d.get("message", err_d))
                raw_code = err_d.get("code")
                code = raw_code if isinstance(raw_code, int) else None
            else:
                msg = str(err)
            raise RpcError(f"RPC error: {msg}", code=code, method=method)
        return resp_dict.get("result")

    async def get_block_by_hash(self, block_hash: str) -> dict[str, Any] | None:
        """Full block with transaction bodies, or None if unknown to the node."""
        result = await self.call("eth_getBlockByHash", [block_hash, True])
        return cast(dict[str, Any], result) if isinstance(result, dict) else None

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        """Receipt for tx_hash, or None while the transaction is not mined."""
        result = await self.call("eth_getTransactionReceipt", [tx_hash])
        return cast(dict[str, Any], result) if isinstance(result, dict) else None

    async def get_transaction(self, tx_hash: str) -> dict[str, Any] | None:
        """Transaction by hash (pending or mined), or None if unknown to the node."""
        result = await self.call("eth_getTransactionByHash", [tx_hash])
        return cast(dict[str, Any], result) if isinstance(result, dict) else None

    async def get_balance(self, address: str) -> int:
        """Native balance in wei at the latest block."""
        return _to_int(await self.call("eth_getBalance", [address, "latest"]))

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        """Account nonce as seen by the node (pending by default)."""
        return _to_int(await self.call("eth_getTransactionCount", [address, block]))

    async def gas_price(self) -> int:
        return _to_int(await self.call("eth_gasPrice", []))

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        """eth_estimateGas for a call object ({from, to, data, value})."""
        return _to_int(await self.call("eth_estimateGas", [tx]))

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed transaction and return its hash."""
        result = await self.call("eth_sendRawTransaction", [raw_tx])
        return str(result).lower()

    async def eth_call(self, to: str, data: str, block: str = "latest") -> str:
        """Perform eth_call (read-only contract call) and return hex output."""
        to_norm = to.strip()
        if not to_norm.startswith("0x"):
            to_norm = "0x" + to_norm
        result = await self.call("eth_call", [{"to": to_norm, "data": data}, block])
        return str(result) if result is not None else "0x0"

    async def erc20_decimals(self, token: str) -> int:
        return _to_int(await self.eth_call(token, SELECTOR_DECIMALS))

    async def erc20_balance_of(self, token: str, owner: str) -> int:
        """Raw (unscaled) ERC-20 balance of owner."""
        raw = _to_int(await self.eth_call(token, SELECTOR_BALANCE_OF + _pad_address(owner)))
        self._logger.debug(
            "rpc_erc20_balance",
            token=token,
            owner_masked=mask_address(owner),
            balance_raw=str(raw),
        )
        return raw

    async def erc20_allowance(self, token: str, owner: str, spender: str) -> int:
        data = SELECTOR_ALLOWANCE + _pad_address(owner) + _pad_address(spender)
        return _to_int(await self.eth_call(token, data))
