"""
Wallet data models for MonScreener.

These are read-only views rebuilt on every request.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from monscreener.models.transfer import TransferRecord


class TransactionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


class TransactionType(str, Enum):
    TRANSFER = "transfer"
    SWAP = "swap"
    APPROVE = "approve"
    CONTRACT_CALL = "contract_call"
    UNKNOWN = "unknown"


class TokenHolding(BaseModel):
    """A token balance held by a wallet."""
    token: str
    name: str = ""
    symbol: str = ""
    balance: int = 0
    decimals: int = 18
    value_usd: float = 0.0
    price: float = 0.0
    logo: Optional[str] = None


class TransactionRecord(BaseModel):
    """A transaction sent from or to a wallet."""
    hash: str
    block_number: int
    timestamp: int = Field(..., description="Unix time in milliseconds")
    from_address: str
    to_address: str = ""
    value: int = 0
    gas_used: int = 0
    gas_price: int = 0
    status: TransactionStatus = TransactionStatus.SUCCESS
    type: TransactionType = TransactionType.UNKNOWN
    token_transfers: List[TransferRecord] = Field(default_factory=list)


class WalletSnapshot(BaseModel):
    """
    Summary of a wallet built from RPC primitives.

    Holdings and transactions start empty; they are loaded by separate
    on-demand calls.
    """
    address: str
    balance: int = 0
    balance_usd: float = 0.0
    transaction_count: int = 0
    token_holdings: List[TokenHolding] = Field(default_factory=list)
    recent_transactions: List[TransactionRecord] = Field(default_factory=list)
    error: Optional[str] = None
