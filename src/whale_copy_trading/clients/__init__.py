"""HTTP, JSON-RPC and API clients."""

from whale_copy_trading.clients.aggregator_client import NATIVE_TOKEN_ADDRESS, ZeroExClient
from whale_copy_trading.clients.block_stream import NewHeadsStream, SubscriptionClosedError
from whale_copy_trading.clients.http import AsyncHttpClient
from whale_copy_trading.clients.price_client import NativePriceClient
from whale_copy_trading.clients.rpc_client import RpcClient

__all__ = [
    "AsyncHttpClient",
    "NATIVE_TOKEN_ADDRESS",
    "NativePriceClient",
    "NewHeadsStream",
    "RpcClient",
    "SubscriptionClosedError",
    "ZeroExClient",
]
