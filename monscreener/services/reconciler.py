"""
Multi-source token reconciliation.

Tokens from the bonding curve, DEX search and token boosts are merged into
one map keyed by lower-cased address. The bonding curve seeds the map since
it is the only source that sees tokens before graduation; DEX sources then
refresh market data without ever erasing what an earlier source set.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from monscreener.models.token import TokenRecord
from monscreener.services.base_service import BaseService
from monscreener.services.bonding_curve import BondingCurveDiscoverer
from monscreener.services.dex_source import DexTokenSource
from monscreener.utils.outcome import Outcome, capture

# Fields refreshed from a later source when it carries a non-empty value
REFRESHED_FIELDS = ("price", "market_cap", "volume_24h", "price_change_24h", "image")

# Fields only filled when the existing record has nothing
FILLED_FIELDS = ("name", "symbol", "creator", "description", "twitter", "telegram", "website")

SOURCE_BONDING_CURVE = "bonding_curve"
SOURCE_DEX_SEARCH = "dex_search"
SOURCE_TOKEN_BOOSTS = "token_boosts"


@dataclass
class ReconciliationResult:
    """Merged tokens plus the error message of every source that failed."""
    tokens: Dict[str, TokenRecord] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def token_list(self) -> List[TokenRecord]:
        return list(self.tokens.values())

    @property
    def complete(self) -> bool:
        return not self.errors


def _has_value(value: Any) -> bool:
    return value not in (None, "", 0, 0.0)


def merge_token(existing: TokenRecord, incoming: TokenRecord) -> TokenRecord:
    """
    Merge ``incoming`` into ``existing`` without losing data.

    Market fields are refreshed only with non-zero, non-empty values and
    descriptive fields are only filled when empty. Graduation and progress
    stay as the earlier source set them.
    """
    update: Dict[str, Any] = {}
    for name in REFRESHED_FIELDS:
        value = getattr(incoming, name)
        if _has_value(value):
            update[name] = value
    for name in FILLED_FIELDS:
        value = getattr(incoming, name)
        if not _has_value(getattr(existing, name)) and _has_value(value):
            update[name] = value
    if not update:
        return existing
    return existing.model_copy(update=update)


def merge_source(
    tokens: Dict[str, TokenRecord],
    incoming: Iterable[TokenRecord],
    mark_graduated: bool = True
) -> int:
    """
    Merge one source's tokens into ``tokens`` in place.

    Tokens not yet present are inserted, marked graduated when
    ``mark_graduated`` is set. Returns the number of inserted tokens.
    """
    inserted = 0
    for token in incoming:
        key = token.address.lower()
        existing = tokens.get(key)
        if existing is not None:
            tokens[key] = merge_token(existing, token)
            continue
        if mark_graduated and not token.graduated:
            token = token.model_copy(update={"graduated": True})
        tokens[key] = token
        inserted += 1
    return inserted


class TokenReconciler(BaseService):
    """Runs the token sources concurrently and merges their results."""

    def __init__(self, discoverer: BondingCurveDiscoverer, dex_source: DexTokenSource):
        super().__init__()
        self.discoverer = discoverer
        self.dex_source = dex_source

    async def reconcile(self) -> ReconciliationResult:
        """
        Fetch every source and merge them in precedence order.

        Never raises for a source failure: the failed source is logged,
        recorded in ``errors`` and contributes nothing.
        """
        async with self.log_timing("reconcile"):
            curve, search, boosts = await asyncio.gather(
                capture(self.discoverer.discover()),
                capture(self.dex_source.fetch_search()),
                capture(self.dex_source.fetch_boosts())
            )

        result = ReconciliationResult()
        sources = (
            (SOURCE_BONDING_CURVE, curve, False),
            (SOURCE_DEX_SEARCH, search, True),
            (SOURCE_TOKEN_BOOSTS, boosts, True),
        )
        for name, outcome, mark_graduated in sources:
            tokens = self._source_tokens(name, outcome, result)
            inserted = merge_source(result.tokens, tokens, mark_graduated=mark_graduated)
            self.logger.info(f"Got {len(tokens)} tokens from {name} ({inserted} new)")

        not_graduated = sum(1 for t in result.tokens.values() if not t.graduated)
        self.log_with_context(
            "info",
            f"Total tokens: {len(result.tokens)} "
            f"({not_graduated} not graduated, {len(result.tokens) - not_graduated} graduated)",
            failed_sources=sorted(result.errors)
        )
        return result

    def _source_tokens(
        self,
        name: str,
        outcome: Outcome,
        result: ReconciliationResult
    ) -> List[TokenRecord]:
        if outcome.ok:
            return list(outcome.value or [])
        self.logger.error(f"Token source {name} failed: {str(outcome.error)}")
        result.errors[name] = str(outcome.error)
        return []
