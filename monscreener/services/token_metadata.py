"""ERC20 metadata and balance lookups over ``eth_call``."""

import asyncio
from typing import Optional

from cachetools import TTLCache

from monscreener.clients.rpc_client import RpcClient
from monscreener.constants import (
    DEFAULT_TOKEN_DECIMALS,
    ERC20_BALANCE_OF_SELECTOR,
    ERC20_DECIMALS_SELECTOR,
    ERC20_NAME_SELECTOR,
    ERC20_SYMBOL_SELECTOR,
)
from monscreener.models.token import TokenMetadata
from monscreener.services.base_service import BaseService
from monscreener.utils.abi import decode_string, decode_uint_words, encode_call
from monscreener.utils.outcome import capture

MAX_DECIMALS = 255


def parse_decimals(payload: Optional[str]) -> int:
    """
    Decode a ``decimals()`` return.

    Empty, malformed, zero or out-of-range values fall back to 18.
    """
    words = decode_uint_words(payload, 1)
    if not words:
        return DEFAULT_TOKEN_DECIMALS
    decimals = words[0]
    if decimals == 0 or decimals > MAX_DECIMALS:
        return DEFAULT_TOKEN_DECIMALS
    return decimals


class TokenMetadataResolver(BaseService):
    """Resolves ERC20 name, symbol and decimals for a contract."""

    def __init__(self, rpc: RpcClient, cache_size: int = 1024, cache_ttl: float = 300.0):
        super().__init__()
        self.rpc = rpc
        # name, symbol and decimals do not change after deployment
        self._cache: TTLCache = TTLCache(maxsize=cache_size, ttl=cache_ttl)

    async def resolve(self, address: str) -> TokenMetadata:
        """
        Resolve a token's metadata with three concurrent calls.

        Each call fails independently: name and symbol default to ``""``,
        decimals to 18. This method never raises for upstream failures.
        Only fully resolved metadata is cached.
        """
        key = address.lower()
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        name, symbol, decimals = await asyncio.gather(
            capture(self.rpc.eth_call(address, encode_call(ERC20_NAME_SELECTOR))),
            capture(self.rpc.eth_call(address, encode_call(ERC20_SYMBOL_SELECTOR))),
            capture(self.rpc.eth_call(address, encode_call(ERC20_DECIMALS_SELECTOR)))
        )

        for label, outcome in (("name", name), ("symbol", symbol), ("decimals", decimals)):
            if not outcome.ok:
                self.logger.debug(f"{label}() failed for {address}: {outcome.error}")

        metadata = TokenMetadata(
            name=decode_string(name.unwrap_or("0x")),
            symbol=decode_string(symbol.unwrap_or("0x")),
            decimals=parse_decimals(decimals.unwrap_or(None))
        )
        if name.ok and symbol.ok and decimals.ok:
            self._cache[key] = metadata
        return metadata

    async def get_token_balance(self, token_address: str, wallet_address: str) -> int:
        """Get a wallet's raw balance of a token, 0 when the call fails."""
        calldata = encode_call(ERC20_BALANCE_OF_SELECTOR, ["address"], [wallet_address])
        outcome = await capture(self.rpc.eth_call(token_address, calldata))
        if not outcome.ok:
            self.logger.debug(f"balanceOf failed for {token_address}: {outcome.error}")
            return 0
        words = decode_uint_words(outcome.value, 1)
        return words[0] if words else 0
