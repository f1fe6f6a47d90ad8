# -*- coding: utf-8 -*-
"""Swap classification from transaction input bytes.

A static selector table names the known swap entry points. Selectors with a
fully known call shape also have a decoder that extracts tokenIn, tokenOut and
amountIn. classify() is total: it never raises, whatever the input.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from eth_abi import decode

from whale_copy_trading.models.swap import SwapClassification


@dataclass(frozen=True, slots=True)
class DecodedSwap:
    token_in: str
    token_out: str
    amount_in: Optional[int] = None


SwapDecoder = Callable[[bytes, int], DecodedSwap]
"""(call arguments without selector, tx value in wei) -> DecodedSwap. May raise; failures are absorbed."""

KNOWN_PROTOCOL = "Known Router"

SWAP_SELECTORS: dict[str, str] = {
    # Uniswap V3 / Universal Router
    "0x5ae401dc": "Uniswap V3 - multicall",
    "0x24856bc3": "Uniswap V3 - execute",
    "0x3593564c": "Uniswap Universal Router - execute",
    "0x04e45aaf": "Uniswap V3 - exactInputSingle",
    "0xdb3e2198": "Uniswap V3 - exactOutputSingle",
    "0xb858183f": "Uniswap V3 - exactInput",
    "0x09b81346": "Uniswap V3 - exactOutput",
    # Aerodrome / V2-style routers
    "0x8a657e67": "Aerodrome - swapExactTokensForTokens",
    "0x38ed1739": "Aerodrome - swapExactTokensForTokens (v2)",
    "0x7ff36ab5": "Aerodrome - swapExactETHForTokens",
    "0x18cbafe5": "Aerodrome - swapExactTokensForETH",
    # 0x / Matcha
    "0xd9627aa4": "0x - sellToUniswap",
    "0x415565b0": "0x - transformERC20",
    "0xf7fcd384": "0x - sellTokenForTokenToUniswapV3",
    # 1inch
    "0x7c025200": "1inch - swap",
    "0xe449022e": "1inch - uniswapV3Swap",
    "0x2e95b6c8": "1inch - unoswap",
    # GMGN / OKX DEX router
    "0xeffbec13": "GMGN/OKX - unxswapByOrderId",
    "0x0b68e4e8": "GMGN/OKX - smartSwapByOrderId",
    "0x2e1a7d4d": "GMGN/OKX - withdrawETH",
    "0xcae6a6b3": "GMGN/OKX - multicall",
}

KNOWN_ROUTERS: frozenset[str] = frozenset(
    {
        "0x4409921ae43a39a11d90f7b7f96cfd0b8093d9fc",
        "0x77449ff075c0a385796da0762bcb46fd5cc884c6",
        "0xcf77a3ba9a5ca399b7c97c74d54e5b1beb874e43",
        "0x3fc91a3afd70395cd496c647d5a6cc9d4b2b7fad",
        "0x1111111254eeb25477b68fb85ed929f73a960582",
        "0x1985b39d5e55940f2e2b2ded79a23b9e5a25f4ff",
    }
)


def _addr(value: Any) -> str:
    return str(value).lower()


def decode_exact_input_single(args: bytes, value: int) -> DecodedSwap:
    """exactInputSingle((tokenIn, tokenOut, fee, recipient, amountIn, amountOutMinimum, sqrtPriceLimitX96))."""
    (params,) = decode(
        ["(address,address,uint24,address,uint256,uint256,uint160)"],
        args,
    )
    return DecodedSwap(token_in=_addr(params[0]), token_out=_addr(params[1]), amount_in=int(params[4]))


def decode_exact_tokens_for_tokens(args: bytes, value: int) -> DecodedSwap:
    """swapExactTokensForTokens / swapExactTokensForETH(amountIn, amountOutMin, path, to, deadline)."""
    amount_in, _, path, _, _ = decode(["uint256", "uint256", "address[]", "address", "uint256"], args)
    if len(path) < 2:
        raise ValueError("swap path needs at least two tokens")
    return DecodedSwap(token_in=_addr(path[0]), token_out=_addr(path[-1]), amount_in=int(amount_in))


def decode_exact_eth_for_tokens(args: bytes, value: int) -> DecodedSwap:
    """swapExactETHForTokens(amountOutMin, path, to, deadline); amount in is the tx value."""
    _, path, _, _ = decode(["uint256", "address[]", "address", "uint256"], args)
    if len(path) < 2:
        raise ValueError("swap path needs at least two tokens")
    return DecodedSwap(token_in=_addr(path[0]), token_out=_addr(path[-1]), amount_in=value)


def _to_bytes(input_data: Any) -> bytes | None:
    if isinstance(input_data, (bytes, bytearray)):
        return bytes(input_data)
    if not isinstance(input_data, str):
        return None
    s = input_data.strip()
    if s[:2].lower() == "0x":
        s = s[2:]
    if len(s) % 2:
        s = s[:-1]
    try:
        return bytes.fromhex(s)
    except ValueError:
        return None


class SwapClassifier:
    """Selector table plus a per-selector decoder registry.

    Each instance owns its tables, so registering a decoder on one classifier
    does not affect another.
    """

    def __init__(
        self,
        selectors: Optional[dict[str, str]] = None,
        routers: Optional[frozenset[str]] = None,
    ) -> None:
        self._selectors = dict(SWAP_SELECTORS if selectors is None else selectors)
        self._routers = frozenset(r.lower() for r in (KNOWN_ROUTERS if routers is None else routers))
        self._decoders: dict[str, SwapDecoder] = {}
        if selectors is None:
            self.register_decoder("0x04e45aaf", self._selectors["0x04e45aaf"], decode_exact_input_single)
            self.register_decoder("0x38ed1739", self._selectors["0x38ed1739"], decode_exact_tokens_for_tokens)
            self.register_decoder("0x18cbafe5", self._selectors["0x18cbafe5"], decode_exact_tokens_for_tokens)
            self.register_decoder("0x7ff36ab5", self._selectors["0x7ff36ab5"], decode_exact_eth_for_tokens)

    def register_decoder(self, selector: str, protocol: str, decoder: SwapDecoder) -> None:
        """Add (or replace) a selector with a decoder for its arguments."""
        selector = selector.lower()
        self._selectors[selector] = protocol
        self._decoders[selector] = decoder

    def is_known_router(self, address: Optional[str]) -> bool:
        return address is not None and address.lower() in self._routers

    def classify(self, input_data: Any, value: int = 0, to: Optional[str] = None) -> SwapClassification:
        """Classify a transaction by its input bytes (and destination).

        Known selector: swap, decoded when a decoder succeeds. Unknown selector
        sent to a known router: swap with unknown tokens. Anything else,
        including empty or malformed input: not a swap.
        """
        data = _to_bytes(input_data)
        if data is None or len(data) < 4:
            return SwapClassification.not_swap()

        selector = "0x" + data[:4].hex()
        protocol = self._selectors.get(selector)
        if protocol is None:
            if isinstance(to, str) and self.is_known_router(to):
                return SwapClassification(is_swap=True, protocol=KNOWN_PROTOCOL, selector=selector)
            return SwapClassification.not_swap(selector)

        decoder = self._decoders.get(selector)
        if decoder is None:
            return SwapClassification(is_swap=True, protocol=protocol, selector=selector)
        try:
            decoded = decoder(data[4:], int(value or 0))
        except Exception:
            # malformed arguments degrade to "swap, tokens unknown"
            return SwapClassification(is_swap=True, protocol=protocol, selector=selector)
        return SwapClassification(
            is_swap=True,
            protocol=protocol,
            selector=selector,
            token_in=decoded.token_in,
            token_out=decoded.token_out,
            amount_in=decoded.amount_in,
        )


_default = SwapClassifier()


def classify(input_data: Any, value: int = 0, to: Optional[str] = None) -> SwapClassification:
    """Classify with the default selector table and decoders."""
    return _default.classify(input_data, value, to)
