"""Pydantic models for tokens, transfers, wallets and API envelopes."""

from monscreener.models.token import TokenMarket, TokenMetadata, TokenPage, TokenRecord
from monscreener.models.transfer import TransferRecord
from monscreener.models.wallet import (
    TokenHolding,
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    WalletSnapshot,
)

__all__ = [
    "TokenMarket",
    "TokenMetadata",
    "TokenPage",
    "TokenRecord",
    "TransferRecord",
    "TokenHolding",
    "TransactionRecord",
    "TransactionStatus",
    "TransactionType",
    "WalletSnapshot",
]
