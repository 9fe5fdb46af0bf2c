"""
ERC20 transfer reconstruction from ``Transfer`` event logs.

A single topic filter cannot express "from OR to" an address, so incoming
and outgoing transfers are scanned separately and unioned.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

from monscreener.clients.rpc_client import RpcClient
from monscreener.config import ScanConfig, get_scan_config
from monscreener.constants import TRANSFER_EVENT_TOPIC
from monscreener.models.token import TokenMetadata
from monscreener.models.transfer import TransferRecord
from monscreener.services.base_service import BaseService
from monscreener.services.log_scanner import LogScanner
from monscreener.services.token_metadata import TokenMetadataResolver
from monscreener.utils.abi import address_to_topic, decode_uint_words, is_valid_address, topic_to_address
from monscreener.utils.batching import batch_process_requests
from monscreener.utils.errors import ValidationError


def parse_transfer_log(
    log: Dict[str, Any],
    metadata: Optional[TokenMetadata] = None
) -> Optional[TransferRecord]:
    """
    Turn a raw ``Transfer`` log into a TransferRecord.

    Sender and recipient come from the low 20 bytes of topics 1 and 2, the
    amount from the data word. Returns None for anything malformed,
    including ERC721 transfers whose amount is indexed.
    """
    metadata = metadata or TokenMetadata()
    try:
        topics = log["topics"]
        if len(topics) < 3 or str(topics[0]).lower() != TRANSFER_EVENT_TOPIC:
            return None

        from_address = topic_to_address(topics[1])
        to_address = topic_to_address(topics[2])
        if from_address is None or to_address is None:
            return None

        words = decode_uint_words(log.get("data"), 1)
        if not words:
            return None

        block_number = int(log["blockNumber"], 16)
        log_index = int(log["logIndex"], 16)

        return TransferRecord(
            token=str(log["address"]).lower(),
            from_address=from_address,
            to_address=to_address,
            value=words[0],
            symbol=metadata.symbol,
            name=metadata.name,
            decimals=metadata.decimals,
            transaction_hash=log["transactionHash"],
            block_number=block_number,
            log_index=log_index
        )
    except (KeyError, IndexError, TypeError, ValueError, AttributeError):
        return None


def dedupe_transfers(transfers: Iterable[TransferRecord], limit: int) -> List[TransferRecord]:
    """
    Drop duplicate (transaction hash, log index) pairs, newest block first,
    and cap the result at ``limit`` records.
    """
    ordered = sorted(transfers, key=lambda t: (t.block_number, t.log_index), reverse=True)
    seen = set()
    unique: List[TransferRecord] = []
    for transfer in ordered:
        if transfer.key in seen:
            continue
        seen.add(transfer.key)
        unique.append(transfer)
        if len(unique) >= limit:
            break
    return unique


async def resolve_log_metadata(
    resolver: TokenMetadataResolver,
    logs: Iterable[Dict[str, Any]],
    batch_size: int = 10
) -> Dict[str, TokenMetadata]:
    """
    Resolve metadata for every distinct token emitting ``logs``.

    Lookups run in batches of ``batch_size``; a token whose lookup fails
    maps to default metadata.
    """
    tokens = sorted({str(log.get("address", "")).lower() for log in logs if log.get("address")})
    outcomes = await batch_process_requests(resolver.resolve, tokens, batch_size=batch_size)
    return {
        token: outcome.unwrap_or(TokenMetadata())
        for token, outcome in zip(tokens, outcomes)
    }


def parse_transfer_logs(
    logs: Iterable[Dict[str, Any]],
    metadata: Dict[str, TokenMetadata]
) -> List[TransferRecord]:
    """Parse ``logs`` with their token's metadata, dropping malformed entries."""
    transfers = []
    for log in logs:
        token = str(log.get("address", "")).lower()
        transfer = parse_transfer_log(log, metadata.get(token))
        if transfer is not None:
            transfers.append(transfer)
    return transfers


class TransferService(BaseService):
    """Reconstructs a wallet's recent ERC20 transfers from event logs."""

    def __init__(
        self,
        rpc: RpcClient,
        scanner: LogScanner,
        resolver: TokenMetadataResolver,
        config: Optional[ScanConfig] = None
    ):
        super().__init__()
        self.rpc = rpc
        self.scanner = scanner
        self.resolver = resolver
        self.config = config or get_scan_config()

    async def get_token_transfers(
        self,
        address: str,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None
    ) -> List[TransferRecord]:
        """
        Get the most recent transfers sent from or to ``address``.

        The window ends at ``to_block`` (the head when omitted) and reaches
        back at most ``transfer_lookback`` blocks. Upstream failures yield an
        empty list.

        Raises:
            ValidationError: If ``address`` is not a hex address
        """
        if not is_valid_address(address):
            raise ValidationError(f"Invalid address: {address}", details={"address": address})

        limit = self.config.max_transfers
        try:
            async with self.log_timing(f"transfers.{address.lower()}"):
                end_block = to_block if to_block is not None else await self.rpc.get_block_number()
                start_block = max(from_block or 0, end_block - self.config.transfer_lookback)
                wallet_topic = address_to_topic(address)

                incoming, outgoing = await asyncio.gather(
                    self.scanner.scan(
                        start_block, end_block,
                        topics=[TRANSFER_EVENT_TOPIC, None, wallet_topic],
                        stop_after=limit
                    ),
                    self.scanner.scan(
                        start_block, end_block,
                        topics=[TRANSFER_EVENT_TOPIC, wallet_topic, None],
                        stop_after=limit
                    )
                )

                logs = incoming + outgoing
                metadata = await resolve_log_metadata(
                    self.resolver, logs, batch_size=self.config.token_batch_size
                )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Error fetching token transfers for {address}: {str(e)}")
            return []

        return dedupe_transfers(parse_transfer_logs(logs, metadata), limit)
