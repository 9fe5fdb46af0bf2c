"""
Token data models for MonScreener.

This module defines Pydantic models for the reconciled token record, the
paginated views over it, and the ERC20 metadata resolved on-chain.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenMetadata(BaseModel):
    """
    ERC20 metadata resolved from ``name()``, ``symbol()`` and ``decimals()``.
    """
    name: str = ""
    symbol: str = ""
    decimals: int = 18

    @property
    def is_empty(self) -> bool:
        """Neither a name nor a symbol could be resolved."""
        return not self.name and not self.symbol


class TokenRecord(BaseModel):
    """
    Model for a token merged across the bonding curve, DEX search and
    token boosts sources.

    ``address`` is always stored lower-cased so records from different
    sources share one identity.
    """
    address: str
    name: str = ""
    symbol: str = ""
    description: Optional[str] = None
    image: Optional[str] = None
    twitter: Optional[str] = None
    telegram: Optional[str] = None
    website: Optional[str] = None
    creator: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    market_cap: float = 0.0
    price: float = 0.0
    price_change_24h: float = 0.0
    volume_24h: float = 0.0
    holders: int = 0
    total_supply: Optional[str] = None
    graduated: bool = False
    bonding_curve_progress: float = Field(0.0, ge=0, le=100)

    @field_validator("address", "creator")
    @classmethod
    def lower_case_address(cls, value: str) -> str:
        return value.lower()

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class TokenPage(BaseModel):
    """
    One page of a sorted token view.

    ``error`` is set when the fetch or one of the token sources failed. The
    page then holds whatever the remaining sources returned, possibly
    nothing, rather than the request failing.
    """
    tokens: List[TokenRecord] = Field(default_factory=list)
    page: int = 1
    limit: int = 50
    total: int = 0
    error: Optional[str] = None


class TokenMarket(BaseModel):
    """
    Market snapshot for a single token.
    """
    token: str
    price: float = 0.0
    market_cap: float = 0.0
    volume_24h: float = 0.0
    price_change_24h: float = 0.0
    high_24h: float = 0.0
    low_24h: float = 0.0
