"""DEXScreener REST client.

This module provides access to the DEXScreener public API: pair search,
token lookups, token profiles and boosted tokens. Results are restricted to
the configured chain.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from monscreener.config import DexScreenerConfig, get_dexscreener_config
from monscreener.constants import DEX_PAIR_QUERIES
from monscreener.logging_config import get_logger
from monscreener.utils.batching import chunked
from monscreener.utils.errors import ExternalServiceError
from monscreener.utils.retry import retry_with_backoff

# Get logger
logger = get_logger(__name__)

SERVICE_NAME = "dexscreener"


class DexScreenerClient:
    """Client for the DEXScreener API.

    Requests are spaced by ``min_request_interval`` seconds to stay under
    the provider's request-per-second ceiling, and each request is retried
    with exponential backoff.
    """

    def __init__(
        self,
        config: Optional[DexScreenerConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the DEXScreener client.

        Args:
            config: DEXScreener configuration. Defaults to environment-based config.
            http_client: Optional pre-built HTTP client
        """
        self.config = config or get_dexscreener_config()
        self.base_url = self.config.base_url.rstrip("/")
        self.chain_id = self.config.chain_id
        self.headers = {"Accept": "application/json"}

        self._last_request_time = 0.0
        self._rate_lock = asyncio.Lock()
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=self.config.timeout)

    async def __aenter__(self) -> "DexScreenerClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def _wait_for_slot(self) -> None:
        async with self._rate_lock:
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self.config.min_request_interval:
                await asyncio.sleep(self.config.min_request_interval - elapsed)
            self._last_request_time = time.monotonic()

    async def _fetch(self, path: str) -> Any:
        await self._wait_for_slot()
        url = f"{self.base_url}{path}"
        try:
            response = await self._http_client.get(url, headers=self.headers)
        except httpx.RequestError as e:
            raise ExternalServiceError(
                f"DEXScreener request failed: {str(e)}",
                service_name=SERVICE_NAME,
                details={"path": path}
            ) from e

        if not response.is_success:
            raise ExternalServiceError(
                f"DEXScreener API error: {response.status_code}",
                service_name=SERVICE_NAME,
                http_status=response.status_code,
                details={"path": path}
            )

        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(
                "DEXScreener returned invalid JSON",
                service_name=SERVICE_NAME,
                details={"path": path}
            ) from e

    async def get_json(self, path: str) -> Any:
        """GET a path relative to the API root, rate limited and retried."""
        return await retry_with_backoff(
            lambda: self._fetch(path),
            max_attempts=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            operation_name=f"dexscreener{path.split('?')[0]}"
        )

    def _on_chain(self, entries: Any) -> List[Dict[str, Any]]:
        if not isinstance(entries, list):
            return []
        return [
            entry for entry in entries
            if isinstance(entry, dict) and entry.get("chainId") == self.chain_id
        ]

    @staticmethod
    def _pairs_of(data: Any) -> Any:
        if isinstance(data, dict):
            return data.get("pairs") or []
        return data or []

    async def search_pairs(self, query: str) -> List[Dict[str, Any]]:
        """Search pairs by free text and keep those on the configured chain."""
        data = await self.get_json(f"/latest/dex/search?q={quote(query, safe='')}")
        return self._on_chain(self._pairs_of(data))

    async def get_token_pairs(self, token_address: str) -> List[Dict[str, Any]]:
        """Get all pairs of a token."""
        data = await self.get_json(f"/token-pairs/v1/{self.chain_id}/{token_address}")
        return self._on_chain(self._pairs_of(data))

    async def get_tokens_by_addresses(self, addresses: Sequence[str]) -> List[Dict[str, Any]]:
        """Get pairs for many tokens, batched to the provider's address limit."""
        results: List[Dict[str, Any]] = []
        for chunk in chunked(list(addresses), self.config.max_addresses_per_request):
            data = await self.get_json(f"/tokens/v1/{self.chain_id}/{','.join(chunk)}")
            results.extend(self._on_chain(self._pairs_of(data)))
        return results

    async def get_latest_token_profiles(self) -> List[Dict[str, Any]]:
        """Get the most recently updated token profiles."""
        return self._on_chain(await self.get_json("/token-profiles/latest/v1"))

    async def get_latest_boosted_tokens(self) -> List[Dict[str, Any]]:
        """Get the most recently boosted tokens."""
        return self._on_chain(await self.get_json("/token-boosts/latest/v1"))

    async def get_top_boosted_tokens(self) -> List[Dict[str, Any]]:
        """Get the tokens with the most active boosts."""
        return self._on_chain(await self.get_json("/token-boosts/top/v1"))

    async def get_pair(self, pair_address: str) -> Optional[Dict[str, Any]]:
        """Get a single pair by its pair address."""
        data = await self.get_json(f"/latest/dex/pairs/{self.chain_id}/{pair_address}")
        if not isinstance(data, dict):
            return None
        pairs = data.get("pairs") or []
        if pairs:
            return pairs[0]
        return data.get("pair")

    async def get_all_monad_pairs(self) -> List[Dict[str, Any]]:
        """Collect pairs from several searches plus boosted tokens.

        Each query fails independently. Pairs are de-duplicated by pair
        address and sorted by 24h volume, highest first.
        """
        pairs: List[Dict[str, Any]] = []
        seen_pairs = set()

        def add(candidates: List[Dict[str, Any]]) -> None:
            for pair in candidates:
                pair_address = pair.get("pairAddress")
                if not pair_address or pair_address in seen_pairs:
                    continue
                seen_pairs.add(pair_address)
                pairs.append(pair)

        for query in DEX_PAIR_QUERIES:
            try:
                add(await self.search_pairs(query))
            except ExternalServiceError as e:
                logger.error(f"Error searching for {query}: {str(e)}")

        try:
            boosted = await self.get_latest_boosted_tokens()
            addresses = [entry["tokenAddress"] for entry in boosted if entry.get("tokenAddress")]
            add(await self.get_tokens_by_addresses(addresses))
        except ExternalServiceError as e:
            logger.error(f"Error fetching boosted tokens: {str(e)}")

        return sorted(pairs, key=lambda p: _volume_24h(p), reverse=True)


def _volume_24h(pair: Dict[str, Any]) -> float:
    volume = pair.get("volume") or {}
    try:
        return float(volume.get("h24") or 0)
    except (TypeError, ValueError):
        return 0.0
