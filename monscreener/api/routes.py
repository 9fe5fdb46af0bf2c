"""
API routes for the MonScreener API.

This module defines the routes for token views, DEX lookups, wallets and
transactions. Every route answers with the ``ApiResponse`` envelope.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path, Query

from monscreener.api.dependencies import get_token_service, get_wallet_service
from monscreener.api.error_handling import handle_api_errors, validate_address
from monscreener.models.api_models import ApiResponse, PaginationInfo
from monscreener.models.token import TokenMarket, TokenPage, TokenRecord
from monscreener.models.transfer import TransferRecord
from monscreener.models.wallet import TransactionRecord, WalletSnapshot
from monscreener.services.token_service import TokenService
from monscreener.services.wallet_service import WalletService
from monscreener.utils.errors import ResourceNotFoundError

# Create routers
tokens_router = APIRouter(prefix="/tokens", tags=["tokens"])
dex_router = APIRouter(prefix="/dex", tags=["dex"])
wallets_router = APIRouter(prefix="/wallets", tags=["wallets"])
transactions_router = APIRouter(prefix="/transactions", tags=["transactions"])


def _page_response(page: TokenPage) -> ApiResponse[TokenPage]:
    return ApiResponse.success_response(
        data=page,
        pagination=PaginationInfo(page=page.page, limit=page.limit, total=page.total)
    )


@tokens_router.get("/newest", response_model=ApiResponse[TokenPage])
@handle_api_errors
async def get_newest_tokens(
    page: int = Query(1, description="Page number (1-indexed)"),
    limit: int = Query(50, description="Tokens per page"),
    token_service: TokenService = Depends(get_token_service)
):
    """
    Get tokens ordered by creation time, newest first.

    Only tokens from the last 24 hours are listed when there are enough of them.
    """
    return _page_response(await token_service.get_tokens_by_creation_time(page, limit))


@tokens_router.get("/market-cap", response_model=ApiResponse[TokenPage])
@handle_api_errors
async def get_tokens_by_market_cap(
    page: int = Query(1, description="Page number (1-indexed)"),
    limit: int = Query(50, description="Tokens per page"),
    token_service: TokenService = Depends(get_token_service)
):
    """Get bonding-curve tokens by progress, then graduated tokens by market cap."""
    return _page_response(await token_service.get_tokens_by_market_cap(page, limit))


@tokens_router.get("/trending", response_model=ApiResponse[TokenPage])
@handle_api_errors
async def get_trending_tokens(
    page: int = Query(1, description="Page number (1-indexed)"),
    limit: int = Query(50, description="Tokens per page"),
    token_service: TokenService = Depends(get_token_service)
):
    """Get bonding-curve tokens by progress, then graduated tokens by 24h volume."""
    return _page_response(await token_service.get_tokens_by_latest_trade(page, limit))


@tokens_router.get("/{address}", response_model=ApiResponse[TokenRecord])
@handle_api_errors
async def get_token(
    address: str = Path(..., description="Token contract address"),
    token_service: TokenService = Depends(get_token_service)
):
    """Get a DEX-listed token."""
    address = validate_address(address)
    token = await token_service.get_token_info(address)
    if token is None:
        raise ResourceNotFoundError(f"Token {address} not found", "token", address)
    return ApiResponse.success_response(data=token)


@tokens_router.get("/{address}/market", response_model=ApiResponse[TokenMarket])
@handle_api_errors
async def get_token_market(
    address: str = Path(..., description="Token contract address"),
    token_service: TokenService = Depends(get_token_service)
):
    """Get price, market cap and 24h figures for a token."""
    address = validate_address(address)
    market = await token_service.get_token_market(address)
    if market is None:
        raise ResourceNotFoundError(f"Market for token {address} not found", "token", address)
    return ApiResponse.success_response(data=market)


@dex_router.get("/search", response_model=ApiResponse[List[TokenRecord]])
@handle_api_errors
async def search_dex(
    q: str = Query(..., description="Free text search"),
    token_service: TokenService = Depends(get_token_service)
):
    """Search DEXScreener for Monad tokens."""
    return ApiResponse.success_response(data=await token_service.search_dex_tokens(q))


@dex_router.get("/tokens", response_model=ApiResponse[List[Dict[str, Any]]])
@handle_api_errors
async def list_dex_pairs(token_service: TokenService = Depends(get_token_service)):
    """List Monad pairs from several searches and boosted tokens, by 24h volume."""
    return ApiResponse.success_response(data=await token_service.get_dex_pairs())


@wallets_router.get("/{address}", response_model=ApiResponse[WalletSnapshot])
@handle_api_errors
async def get_wallet(
    address: str = Path(..., description="Wallet address"),
    wallet_service: WalletService = Depends(get_wallet_service)
):
    """Get a wallet's MON balance, nonce and USD estimate."""
    address = validate_address(address)
    return ApiResponse.success_response(data=await wallet_service.get_wallet_info(address))


@wallets_router.get("/{address}/transfers", response_model=ApiResponse[List[TransferRecord]])
@handle_api_errors
async def get_wallet_transfers(
    address: str = Path(..., description="Wallet address"),
    wallet_service: WalletService = Depends(get_wallet_service)
):
    """Get a wallet's most recent ERC20 transfers, newest first."""
    address = validate_address(address)
    return ApiResponse.success_response(data=await wallet_service.get_token_transfers(address))


@wallets_router.get("/{address}/transactions", response_model=ApiResponse[List[TransactionRecord]])
@handle_api_errors
async def get_wallet_transactions(
    address: str = Path(..., description="Wallet address"),
    blocks: int = Query(100, ge=1, le=1000, description="Number of recent blocks to scan"),
    limit: int = Query(50, ge=1, le=200, description="Maximum transactions to return"),
    wallet_service: WalletService = Depends(get_wallet_service)
):
    """Get transactions sent from or to a wallet in the latest blocks."""
    address = validate_address(address)
    transactions = await wallet_service.get_recent_transactions(address, num_blocks=blocks, limit=limit)
    return ApiResponse.success_response(data=transactions)


@wallets_router.get("/{address}/tokens/{token}/balance", response_model=ApiResponse[Dict[str, Any]])
@handle_api_errors
async def get_wallet_token_balance(
    address: str = Path(..., description="Wallet address"),
    token: str = Path(..., description="Token contract address"),
    wallet_service: WalletService = Depends(get_wallet_service)
):
    """Get a wallet's raw balance of one token."""
    address = validate_address(address)
    token = validate_address(token, field="token")
    balance = await wallet_service.get_token_balance(token, address)
    return ApiResponse.success_response(data={"wallet": address, "token": token, "balance": str(balance)})


@transactions_router.get("/{tx_hash}", response_model=ApiResponse[TransactionRecord])
@handle_api_errors
async def get_transaction(
    tx_hash: str = Path(..., description="Transaction hash"),
    wallet_service: WalletService = Depends(get_wallet_service)
):
    """Get a transaction with its status, classification and token transfers."""
    transaction = await wallet_service.get_transaction(tx_hash)
    if transaction is None:
        raise ResourceNotFoundError(f"Transaction {tx_hash} not found", "transaction", tx_hash)
    return ApiResponse.success_response(data=transaction)


routers = [tokens_router, dex_router, wallets_router, transactions_router]
