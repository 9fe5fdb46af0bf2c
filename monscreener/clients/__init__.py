"""Upstream clients: the Monad JSON-RPC pool and the DEXScreener API."""

from monscreener.clients.dexscreener_client import DexScreenerClient
from monscreener.clients.rpc_client import RpcClient

__all__ = [
    'DexScreenerClient',
    'RpcClient',
]
