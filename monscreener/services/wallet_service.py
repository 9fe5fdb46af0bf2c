"""
Wallet service for MonScreener.

This module provides wallet summaries and transaction lookups built from
RPC primitives. Expensive data (transfers, recent transactions) is loaded
by separate calls rather than as part of the summary.
"""

import asyncio
from decimal import Decimal
from typing import Any, Dict, List, Optional

from monscreener.clients.rpc_client import RpcClient
from monscreener.config import ScanConfig, get_scan_config
from monscreener.constants import APPROVE_SELECTOR, NATIVE_DECIMALS, SWAP_SELECTORS, TRANSFER_SELECTOR
from monscreener.models.transfer import TransferRecord
from monscreener.models.wallet import (
    TransactionRecord,
    TransactionStatus,
    TransactionType,
    WalletSnapshot,
)
from monscreener.services.base_service import BaseService
from monscreener.services.token_metadata import TokenMetadataResolver
from monscreener.services.transfer_service import TransferService, parse_transfer_logs, resolve_log_metadata
from monscreener.utils.abi import hex_to_int, is_valid_address, is_valid_tx_hash
from monscreener.utils.batching import batch_process_requests
from monscreener.utils.errors import ValidationError

BLOCK_BATCH_SIZE = 10


def classify_transaction(tx: Dict[str, Any]) -> TransactionType:
    """
    Classify a transaction by its input selector.

    Contract creations and unknown selectors are contract calls; a call
    with no input is a plain value transfer.
    """
    if not tx.get("to"):
        return TransactionType.CONTRACT_CALL

    data = (tx.get("input") or tx.get("data") or "0x").lower()
    if data == "0x":
        return TransactionType.TRANSFER

    selector = data[:10]
    if selector == APPROVE_SELECTOR:
        return TransactionType.APPROVE
    if selector in SWAP_SELECTORS:
        return TransactionType.SWAP
    if selector == TRANSFER_SELECTOR:
        return TransactionType.TRANSFER
    return TransactionType.CONTRACT_CALL


def _validate_address(address: str) -> None:
    if not is_valid_address(address):
        raise ValidationError(f"Invalid address: {address}", details={"address": address})


class WalletService(BaseService):
    """Service for wallet summaries, transfers and transactions."""

    def __init__(
        self,
        rpc: RpcClient,
        transfers: TransferService,
        resolver: TokenMetadataResolver,
        config: Optional[ScanConfig] = None
    ):
        """
        Initialize the wallet service.

        Args:
            rpc: Monad RPC client
            transfers: Transfer reconstructor for token transfer history
            resolver: ERC20 resolver for token balances
            config: Scan configuration
        """
        super().__init__()
        self.rpc = rpc
        self.transfers = transfers
        self.resolver = resolver
        self.config = config or get_scan_config()

    async def get_wallet_info(self, address: str) -> WalletSnapshot:
        """
        Get a wallet's native balance, nonce and USD estimate.

        On upstream failure a zeroed snapshot with ``error`` set is returned.

        Raises:
            ValidationError: If ``address`` is not a hex address
        """
        _validate_address(address)
        try:
            balance, transaction_count = await asyncio.gather(
                self.rpc.get_balance(address),
                self.rpc.get_transaction_count(address)
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Error fetching wallet info for {address}: {str(e)}")
            return WalletSnapshot(address=address, error=str(e))

        balance_mon = Decimal(balance) / Decimal(10 ** NATIVE_DECIMALS)
        return WalletSnapshot(
            address=address,
            balance=balance,
            balance_usd=float(balance_mon * self.config.mon_usd_price),
            transaction_count=transaction_count
        )

    async def get_token_transfers(self, address: str) -> List[TransferRecord]:
        """Get the wallet's most recent ERC20 transfers."""
        return await self.transfers.get_token_transfers(address)

    async def get_token_balance(self, token_address: str, wallet_address: str) -> int:
        """
        Get a wallet's raw balance of one token.

        Raises:
            ValidationError: If either address is not a hex address
        """
        _validate_address(token_address)
        _validate_address(wallet_address)
        return await self.resolver.get_token_balance(token_address, wallet_address)

    async def get_recent_transactions(
        self,
        address: str,
        num_blocks: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[TransactionRecord]:
        """
        Find transactions sent from or to ``address`` in the latest blocks.

        Blocks are fetched with full transactions, newest first, in batches
        of 10; scanning stops once ``limit`` matches are found. A block that
        fails to load is skipped.

        Raises:
            ValidationError: If ``address`` is not a hex address
        """
        _validate_address(address)
        num_blocks = num_blocks or self.config.recent_transaction_blocks
        limit = limit or self.config.recent_transaction_limit
        wallet = address.lower()

        def matches(tx: Dict[str, Any]) -> bool:
            return (tx.get("from") or "").lower() == wallet or (tx.get("to") or "").lower() == wallet

        def matching(block: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
            if not block:
                return []
            return [tx for tx in block.get("transactions") or [] if isinstance(tx, dict) and matches(tx)]

        def enough(outcomes) -> bool:
            return sum(len(matching(o.value)) for o in outcomes if o.ok) >= limit

        try:
            head = await self.rpc.get_block_number()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Error fetching recent transactions for {address}: {str(e)}")
            return []

        start_block = max(head - num_blocks, 0)
        block_numbers = list(range(head, start_block, -1))

        async with self.log_timing(f"recent_transactions.{wallet}"):
            outcomes = await batch_process_requests(
                lambda number: self.rpc.get_block(number, full_transactions=True),
                block_numbers,
                batch_size=BLOCK_BATCH_SIZE,
                stop_when=enough
            )

        transactions: List[TransactionRecord] = []
        for number, outcome in zip(block_numbers, outcomes):
            if not outcome.ok:
                self.logger.debug(f"Skipping block {number}: {outcome.error}")
                continue
            for tx in matching(outcome.value):
                transactions.append(self._to_record(tx, outcome.value))

        return transactions[:limit]

    async def get_transaction(self, tx_hash: str) -> Optional[TransactionRecord]:
        """
        Get a transaction with its receipt status, gas and token transfers.

        Returns None when the node does not know the hash.

        Raises:
            ValidationError: If ``tx_hash`` is not a 32-byte hex hash
        """
        if not is_valid_tx_hash(tx_hash):
            raise ValidationError(f"Invalid transaction hash: {tx_hash}", details={"hash": tx_hash})

        tx = await self.rpc.get_transaction(tx_hash)
        if not tx:
            return None

        receipt = await self.execute_with_fallback(
            self.rpc.get_transaction_receipt(tx_hash),
            fallback_value=None,
            error_message=f"Error fetching receipt for {tx_hash}"
        )

        block = None
        if tx.get("blockNumber"):
            block = await self.execute_with_fallback(
                self.rpc.get_block(hex_to_int(tx["blockNumber"])),
                fallback_value=None,
                error_message=f"Error fetching block for {tx_hash}"
            )

        record = self._to_record(tx, block or {}, receipt)
        if receipt:
            logs = receipt.get("logs") or []
            metadata = await resolve_log_metadata(
                self.resolver, logs, batch_size=self.config.token_batch_size
            )
            record.token_transfers = parse_transfer_logs(logs, metadata)
        return record

    @staticmethod
    def _to_record(
        tx: Dict[str, Any],
        block: Dict[str, Any],
        receipt: Optional[Dict[str, Any]] = None
    ) -> TransactionRecord:
        if receipt is None:
            # Transactions in a mined block without a receipt lookup
            status = TransactionStatus.SUCCESS if block else TransactionStatus.PENDING
            # Gas used is only known from the receipt
            gas_used = 0
        else:
            status = TransactionStatus.SUCCESS if receipt.get("status") == "0x1" else TransactionStatus.FAILED
            gas_used = hex_to_int(receipt.get("gasUsed"))

        return TransactionRecord(
            hash=tx.get("hash", ""),
            block_number=hex_to_int(tx.get("blockNumber") or block.get("number")),
            timestamp=hex_to_int(block.get("timestamp")) * 1000,
            from_address=tx.get("from") or "",
            to_address=tx.get("to") or "",
            value=hex_to_int(tx.get("value")),
            gas_used=gas_used,
            gas_price=hex_to_int(tx.get("gasPrice")),
            status=status,
            type=classify_transaction(tx)
        )
