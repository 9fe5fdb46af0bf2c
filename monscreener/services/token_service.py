"""
Token service for MonScreener.

This module provides the token-facing operations exposed by the API: the
three sorted token views over the reconciled token set, plus single-token
lookups against DEXScreener.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

from monscreener.clients.dexscreener_client import DexScreenerClient
from monscreener.models.token import TokenMarket, TokenPage, TokenRecord
from monscreener.services.base_service import BaseService
from monscreener.services.dex_source import pair_to_token, unique_by_base_token
from monscreener.services.reconciler import TokenReconciler
from monscreener.services import token_views
from monscreener.utils.abi import is_valid_address
from monscreener.utils.errors import ValidationError

ViewFunction = Callable[..., TokenPage]


class TokenService(BaseService):
    """Service for token views and lookups."""

    def __init__(self, reconciler: TokenReconciler, dex_client: DexScreenerClient):
        """
        Initialize the token service.

        Args:
            reconciler: Multi-source token reconciler
            dex_client: DEXScreener client for single-token lookups
        """
        super().__init__()
        self.reconciler = reconciler
        self.dex_client = dex_client

    async def get_all_tokens(self) -> List[TokenRecord]:
        """Get every reconciled token, unordered."""
        result = await self.reconciler.reconcile()
        return result.token_list

    async def get_tokens_by_creation_time(self, page: int = 1, limit: int = 50) -> TokenPage:
        """Get a page of the newest tokens."""
        return await self._view(token_views.by_creation_time, page, limit)

    async def get_tokens_by_market_cap(self, page: int = 1, limit: int = 50) -> TokenPage:
        """Get a page of tokens ordered by progress, then market cap."""
        return await self._view(token_views.by_market_cap, page, limit)

    async def get_tokens_by_latest_trade(self, page: int = 1, limit: int = 50) -> TokenPage:
        """Get a page of tokens ordered by progress, then 24h volume."""
        return await self._view(token_views.by_latest_trade, page, limit)

    async def _view(self, view: ViewFunction, page: int, limit: int) -> TokenPage:
        # Bad paging is the caller's error, not a fetch failure
        token_views.validate_paging(page, limit)
        try:
            result = await self.reconciler.reconcile()
            token_page = view(result.token_list, page=page, limit=limit)
            if not result.complete:
                failed = ", ".join(sorted(result.errors))
                token_page.error = f"Token sources failed: {failed}"
            return token_page
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to fetch tokens for {view.__name__}: {str(e)}")
            return TokenPage(page=page, limit=limit, total=0, error=str(e))

    async def get_token_info(self, address: str) -> Optional[TokenRecord]:
        """
        Look a token up on DEXScreener.

        A listed token is graduated by definition, so the record always
        carries ``graduated=True`` and full progress.

        Raises:
            ValidationError: If ``address`` is not a hex address
        """
        if not is_valid_address(address):
            raise ValidationError(f"Invalid token address: {address}", details={"address": address})

        pairs = await self.execute_with_fallback(
            self.dex_client.get_token_pairs(address),
            fallback_value=[],
            error_message=f"Error fetching token info for {address}"
        )
        if not pairs:
            return None

        try:
            token = pair_to_token(pairs[0])
        except (KeyError, TypeError, ValueError) as e:
            self.logger.warning(f"Malformed pair for {address}: {str(e)}")
            return None
        return token.model_copy(update={"graduated": True, "bonding_curve_progress": 100.0})

    async def get_token_market(self, address: str) -> Optional[TokenMarket]:
        """Get a market snapshot for a token, None when it is not listed."""
        token = await self.get_token_info(address)
        if token is None:
            return None

        return TokenMarket(
            token=token.address,
            price=token.price,
            market_cap=token.market_cap,
            volume_24h=token.volume_24h,
            price_change_24h=token.price_change_24h
        )

    async def search_dex_tokens(self, query: str) -> List[TokenRecord]:
        """
        Search DEXScreener and map each base token to a record.

        Raises:
            ValidationError: If ``query`` is blank
        """
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query must not be empty")

        pairs = await self.dex_client.search_pairs(query)
        tokens = []
        for pair in unique_by_base_token(pairs):
            try:
                tokens.append(pair_to_token(pair))
            except (KeyError, TypeError, ValueError):
                continue
        return tokens

    async def get_dex_pairs(self) -> List[Dict[str, Any]]:
        """Get every Monad pair DEXScreener knows about, by 24h volume."""
        return await self.dex_client.get_all_monad_pairs()
