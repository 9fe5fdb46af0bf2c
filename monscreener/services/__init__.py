"""Aggregation services built on the RPC and DEXScreener clients."""

from monscreener.services.bonding_curve import BondingCurveDiscoverer
from monscreener.services.dex_source import DexTokenSource
from monscreener.services.log_scanner import LogScanner
from monscreener.services.reconciler import ReconciliationResult, TokenReconciler
from monscreener.services.token_metadata import TokenMetadataResolver
from monscreener.services.token_service import TokenService
from monscreener.services.transfer_service import TransferService
from monscreener.services.wallet_service import WalletService

__all__ = [
    'BondingCurveDiscoverer',
    'DexTokenSource',
    'LogScanner',
    'ReconciliationResult',
    'TokenMetadataResolver',
    'TokenReconciler',
    'TokenService',
    'TransferService',
    'WalletService',
]
