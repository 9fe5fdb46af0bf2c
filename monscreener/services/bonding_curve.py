"""
nad.fun bonding-curve token discovery.

New tokens are found by scanning the bonding-curve contract's
``CurveCreate`` events over a recent block window. Each token is then
enriched from the lens contract (graduation, progress), its ERC20 metadata
and the curve reserves.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from monscreener.clients.rpc_client import RpcClient
from monscreener.config import ScanConfig, get_scan_config
from monscreener.constants import (
    BONDING_CURVE_ADDRESS,
    BONDING_CURVE_CURVES_SELECTOR,
    CURVE_CREATE_TOPIC,
    LENS_ADDRESS,
    LENS_GET_PROGRESS_SELECTOR,
    LENS_IS_GRADUATED_SELECTOR,
)
from monscreener.models.token import TokenRecord
from monscreener.services.base_service import BaseService
from monscreener.services.log_scanner import LogScanner
from monscreener.services.token_metadata import TokenMetadataResolver
from monscreener.utils.abi import decode_bool, decode_uint_words, encode_call, hex_to_int, topic_to_address
from monscreener.utils.batching import batch_process_requests

# getProgress returns basis points: 10000 == 100%
PROGRESS_SCALE = 100


@dataclass
class CurveCreation:
    """A token creation seen in the bonding-curve event log."""
    token: str
    creator: str
    block_number: int


@dataclass
class LensState:
    """Graduation status and progress reported by the lens contract."""
    graduated: bool
    progress: float


@dataclass
class CurveState:
    """Virtual reserves of a bonding curve."""
    virtual_mon: int
    virtual_token: int

    @property
    def price_in_mon(self) -> Decimal:
        if self.virtual_token == 0:
            return Decimal(0)
        return Decimal(self.virtual_mon) / Decimal(self.virtual_token)


def parse_curve_creations(logs: Iterable[Dict[str, Any]]) -> List[CurveCreation]:
    """
    Extract token creations from ``CurveCreate`` logs.

    Topic 1 holds the creator and topic 2 the token. Malformed entries are
    skipped. When a token appears more than once the latest block wins.
    The result is ordered newest first.
    """
    creations: Dict[str, CurveCreation] = {}
    for log in logs:
        topics = log.get("topics") or []
        if len(topics) < 3:
            continue
        token = topic_to_address(topics[2])
        if token is None:
            continue
        creator = topic_to_address(topics[1]) or ""
        block_number = hex_to_int(log.get("blockNumber"), default=0)

        existing = creations.get(token)
        if existing is None or block_number > existing.block_number:
            creations[token] = CurveCreation(token=token, creator=creator, block_number=block_number)

    return sorted(creations.values(), key=lambda c: c.block_number, reverse=True)


class BondingCurveDiscoverer(BaseService):
    """Discovers bonding-curve tokens and their on-chain state."""

    def __init__(
        self,
        rpc: RpcClient,
        scanner: LogScanner,
        resolver: TokenMetadataResolver,
        config: Optional[ScanConfig] = None,
        bonding_curve_address: str = BONDING_CURVE_ADDRESS,
        lens_address: str = LENS_ADDRESS
    ):
        super().__init__()
        self.rpc = rpc
        self.scanner = scanner
        self.resolver = resolver
        self.config = config or get_scan_config()
        self.bonding_curve_address = bonding_curve_address
        self.lens_address = lens_address

    async def get_lens_state(self, token: str) -> LensState:
        """
        Query ``isGraduated`` and ``getProgress`` for a token.

        Raises:
            RpcError: If either lens call fails
        """
        graduated_raw, progress_raw = await asyncio.gather(
            self.rpc.eth_call(
                self.lens_address,
                encode_call(LENS_IS_GRADUATED_SELECTOR, ["address"], [token])
            ),
            self.rpc.eth_call(
                self.lens_address,
                encode_call(LENS_GET_PROGRESS_SELECTOR, ["address"], [token])
            )
        )
        words = decode_uint_words(progress_raw, 1)
        progress = words[0] / PROGRESS_SCALE if words else 0.0
        return LensState(graduated=decode_bool(graduated_raw), progress=min(progress, 100.0))

    async def get_curve_state(self, token: str) -> Optional[CurveState]:
        """Read the curve's virtual reserves, None when unavailable."""
        result = await self.rpc.eth_call(
            self.bonding_curve_address,
            encode_call(BONDING_CURVE_CURVES_SELECTOR, ["address"], [token])
        )
        words = decode_uint_words(result, 2)
        if not words:
            return None
        return CurveState(virtual_mon=words[0], virtual_token=words[1])

    async def scan_creations(self, head: int) -> List[CurveCreation]:
        """Scan the recent window for ``CurveCreate`` events."""
        from_block = max(head - self.config.bonding_curve_window + 1, 0)
        logs = await self.scanner.scan(
            from_block, head,
            address=self.bonding_curve_address,
            topics=[CURVE_CREATE_TOPIC]
        )
        self.logger.info(f"Got {len(logs)} CurveCreate events in blocks {from_block}-{head}")
        return parse_curve_creations(logs)

    async def discover(self) -> List[TokenRecord]:
        """
        Discover recently created bonding-curve tokens.

        Per-token lookups run in bounded batches; a token whose lens or
        metadata lookup fails is left out without affecting the others.

        Raises:
            RpcError: If the head block cannot be read
        """
        async with self.log_timing("bonding_curve.discover"):
            head = await self.rpc.get_block_number()
            creations = await self.scan_creations(head)
            creations = creations[:self.config.max_discovered_tokens]
            now = datetime.now(timezone.utc)

            outcomes = await batch_process_requests(
                lambda creation: self._build_token(creation, head, now),
                creations,
                batch_size=self.config.token_batch_size
            )

        tokens: List[TokenRecord] = []
        for creation, outcome in zip(creations, outcomes):
            if not outcome.ok:
                self.logger.debug(f"Failed to get data for token {creation.token}: {outcome.error}")
                continue
            if outcome.value is not None:
                tokens.append(outcome.value)

        not_graduated = sum(1 for t in tokens if not t.graduated)
        self.logger.info(
            f"Fetched {len(tokens)} tokens from bonding curve "
            f"({not_graduated} not graduated, {len(tokens) - not_graduated} graduated)"
        )
        return tokens

    async def _build_token(
        self,
        creation: CurveCreation,
        head: int,
        now: datetime
    ) -> Optional[TokenRecord]:
        lens, metadata = await asyncio.gather(
            self.get_lens_state(creation.token),
            self.resolver.resolve(creation.token)
        )
        if metadata.is_empty:
            return None

        price = 0.0
        market_cap = 0.0
        if not lens.graduated:
            price = await self._estimate_price(creation.token)
            # TODO: read totalSupply() instead of assuming a fixed supply
            market_cap = price * self.config.assumed_total_supply

        blocks_ago = max(head - creation.block_number, 0)
        created_at = now - timedelta(seconds=blocks_ago * self.config.block_time_seconds)

        return TokenRecord(
            address=creation.token,
            name=metadata.name,
            symbol=metadata.symbol,
            creator=creation.creator,
            created_at=created_at,
            market_cap=market_cap,
            price=price,
            graduated=lens.graduated,
            bonding_curve_progress=lens.progress
        )

    async def _estimate_price(self, token: str) -> float:
        curve = await self.execute_with_fallback(
            self.get_curve_state(token),
            fallback_value=None,
            error_message=f"Curve state lookup failed for {token}"
        )
        if curve is None:
            return 0.0
        return float(curve.price_in_mon * self.config.mon_usd_price)
