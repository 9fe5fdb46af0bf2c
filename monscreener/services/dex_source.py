"""
DEXScreener-backed token source.

DEX search and token boosts hit the same upstream API, so they are exposed
as two query strategies of one source rather than two independent sources.
Presence on a DEX means the token has left the bonding curve.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from monscreener.clients.dexscreener_client import DexScreenerClient
from monscreener.constants import DEX_SEARCH_QUERIES, MAX_BOOSTED_TOKENS, NADFUN_DEX_ID
from monscreener.models.token import TokenRecord, utc_now
from monscreener.services.base_service import BaseService
from monscreener.utils.errors import ExternalServiceError

# Liquidity in USD above which a pair counts as graduated regardless of DEX
GRADUATION_LIQUIDITY_USD = 10_000


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _social_url(socials: Iterable[Dict[str, Any]], kind: str) -> Optional[str]:
    for social in socials:
        if social.get("type") == kind:
            return social.get("url")
    return None


def pair_to_token(pair: Dict[str, Any]) -> TokenRecord:
    """
    Map a DEXScreener pair onto a TokenRecord for its base token.

    Raises:
        KeyError: If the pair has no base token address
    """
    base = pair["baseToken"]
    info = pair.get("info") or {}
    socials = info.get("socials") or []
    websites = info.get("websites") or []
    liquidity = _as_float((pair.get("liquidity") or {}).get("usd"))
    on_launchpad = pair.get("dexId") == NADFUN_DEX_ID

    created_at = utc_now()
    if pair.get("pairCreatedAt"):
        created_at = datetime.fromtimestamp(pair["pairCreatedAt"] / 1000, tz=timezone.utc)

    return TokenRecord(
        address=base["address"],
        name=base.get("name") or "",
        symbol=base.get("symbol") or "",
        image=info.get("imageUrl"),
        twitter=_social_url(socials, "twitter"),
        telegram=_social_url(socials, "telegram"),
        website=websites[0].get("url") if websites else None,
        created_at=created_at,
        market_cap=_as_float(pair.get("marketCap")) or _as_float(pair.get("fdv")),
        price=_as_float(pair.get("priceUsd")),
        price_change_24h=_as_float((pair.get("priceChange") or {}).get("h24")),
        volume_24h=_as_float((pair.get("volume") or {}).get("h24")),
        graduated=not on_launchpad or liquidity > GRADUATION_LIQUIDITY_USD,
        bonding_curve_progress=100.0 if on_launchpad else min(liquidity / 100, 100.0)
    )


def unique_by_base_token(pairs: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    seen = set()
    unique = []
    for pair in pairs:
        address = ((pair.get("baseToken") or {}).get("address") or "").lower()
        if not address or address in seen:
            continue
        seen.add(address)
        unique.append(pair)
    return unique


class DexTokenSource(BaseService):
    """Token source over DEXScreener search and boosted tokens."""

    def __init__(
        self,
        client: DexScreenerClient,
        search_queries: Iterable[str] = DEX_SEARCH_QUERIES,
        max_boosted: int = MAX_BOOSTED_TOKENS
    ):
        super().__init__()
        self.client = client
        self.search_queries = list(search_queries)
        self.max_boosted = max_boosted

    async def fetch_search(self) -> List[TokenRecord]:
        """
        Search several queries and return one token per base token.

        A failing query is logged and skipped. Raises only when every query
        failed, so the caller can tell "no results" from "source down".
        """
        pairs: List[Dict[str, Any]] = []
        failures = 0
        for query in self.search_queries:
            try:
                pairs.extend(await self.client.search_pairs(query))
            except ExternalServiceError as e:
                failures += 1
                self.logger.warning(f"DEX search for '{query}' failed: {str(e)}")

        if self.search_queries and failures == len(self.search_queries):
            raise ExternalServiceError("All DEX search queries failed", service_name="dexscreener")

        tokens = self._to_tokens(unique_by_base_token(pairs))
        self.logger.info(f"Got {len(tokens)} tokens from DEX search")
        return tokens

    async def fetch_boosts(self) -> List[TokenRecord]:
        """
        Resolve the top boosted tokens to their first listed pair.

        Raises:
            ExternalServiceError: If the boosts list cannot be fetched
        """
        boosted = await self.client.get_top_boosted_tokens()
        addresses: List[str] = []
        seen = set()
        for entry in boosted:
            address = entry.get("tokenAddress")
            if address and address.lower() not in seen:
                seen.add(address.lower())
                addresses.append(address)
        addresses = addresses[:self.max_boosted]
        if not addresses:
            return []

        pairs = await self.client.get_tokens_by_addresses(addresses)
        tokens = self._to_tokens(unique_by_base_token(pairs))
        self.logger.info(f"Got {len(tokens)} tokens from token boosts")
        return tokens

    def _to_tokens(self, pairs: Iterable[Dict[str, Any]]) -> List[TokenRecord]:
        tokens = []
        for pair in pairs:
            try:
                tokens.append(pair_to_token(pair))
            except (KeyError, TypeError, ValueError) as e:
                self.logger.debug(f"Skipping malformed pair {pair.get('pairAddress')}: {str(e)}")
        return tokens
