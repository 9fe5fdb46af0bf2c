"""Transfer data models for MonScreener."""

from typing import Tuple

from pydantic import BaseModel, Field


class TransferRecord(BaseModel):
    """
    One ERC20 ``Transfer`` event, enriched with the token's metadata.

    A transfer is identified by its transaction hash and log index.
    """
    token: str
    from_address: str
    to_address: str
    value: int = Field(..., ge=0, description="Raw amount in the token's smallest unit")
    symbol: str = ""
    name: str = ""
    decimals: int = 18
    transaction_hash: str
    block_number: int
    log_index: int

    @property
    def key(self) -> Tuple[str, int]:
        return (self.transaction_hash.lower(), self.log_index)

    @property
    def amount(self) -> float:
        """Value scaled by the token decimals."""
        return self.value / (10 ** self.decimals)
