"""
Dependency wiring for the MonScreener API.

One ServiceContainer is built per application and stored on
``app.state``; route dependencies read services from it so tests can swap
in fakes with ``app.dependency_overrides``.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import Request

from monscreener.clients.dexscreener_client import DexScreenerClient
from monscreener.clients.rpc_client import RpcClient
from monscreener.config import AppConfig, get_app_config
from monscreener.logging_config import get_logger
from monscreener.services.bonding_curve import BondingCurveDiscoverer
from monscreener.services.dex_source import DexTokenSource
from monscreener.services.log_scanner import LogScanner
from monscreener.services.reconciler import TokenReconciler
from monscreener.services.token_metadata import TokenMetadataResolver
from monscreener.services.token_service import TokenService
from monscreener.services.transfer_service import TransferService
from monscreener.services.wallet_service import WalletService
from monscreener.utils.errors import ConfigurationError

# Get logger
logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    """Clients and services shared by every request."""
    rpc: RpcClient
    dex_client: DexScreenerClient
    token_service: TokenService
    wallet_service: WalletService

    async def close(self) -> None:
        """Close the upstream HTTP clients."""
        await self.rpc.close()
        await self.dex_client.close()


def build_container(
    config: Optional[AppConfig] = None,
    rpc_http_client: Optional[httpx.AsyncClient] = None,
    dex_http_client: Optional[httpx.AsyncClient] = None
) -> ServiceContainer:
    """
    Build the client and service graph.

    Args:
        config: Application configuration. Defaults to environment-based config.
        rpc_http_client: Optional HTTP client for the RPC pool
        dex_http_client: Optional HTTP client for DEXScreener

    Returns:
        Wired service container
    """
    config = config or get_app_config()
    scan = config.scan

    rpc = RpcClient(config.rpc, http_client=rpc_http_client)
    dex_client = DexScreenerClient(config.dexscreener, http_client=dex_http_client)

    scanner = LogScanner(rpc, chunk_size=scan.chunk_size, parallelism=scan.parallel_chunks)
    resolver = TokenMetadataResolver(rpc)
    transfers = TransferService(rpc, scanner, resolver, scan)
    discoverer = BondingCurveDiscoverer(rpc, scanner, resolver, scan)
    reconciler = TokenReconciler(discoverer, DexTokenSource(dex_client))

    logger.info(f"Services wired with {len(config.rpc.endpoints)} RPC endpoint(s)")
    return ServiceContainer(
        rpc=rpc,
        dex_client=dex_client,
        token_service=TokenService(reconciler, dex_client),
        wallet_service=WalletService(rpc, transfers, resolver, scan)
    )


def get_container(request: Request) -> ServiceContainer:
    """Get the service container of the running application."""
    container = getattr(request.app.state, "services", None)
    if container is None:
        raise ConfigurationError("Services are not initialized")
    return container


def get_token_service(request: Request) -> TokenService:
    """Get the token service for a request."""
    return get_container(request).token_service


def get_wallet_service(request: Request) -> WalletService:
    """Get the wallet service for a request."""
    return get_container(request).wallet_service
