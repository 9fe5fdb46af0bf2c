"""Common test fixtures for MonScreener tests.

This module provides fixtures and log/pair builders that can be reused
across different test modules.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock

import pytest
from eth_abi import encode

from monscreener.clients.rpc_client import RpcClient
from monscreener.config import ScanConfig
from monscreener.constants import CURVE_CREATE_TOPIC, TRANSFER_EVENT_TOPIC
from monscreener.models.token import TokenRecord
from monscreener.utils.abi import address_to_topic, to_hex

WALLET = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
TOKEN_A = "0xaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
TOKEN_B = "0xbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
CREATOR = "0xcccccccccccccccccccccccccccccccccccccccc"


def abi_string(text: str) -> str:
    """ABI encode a dynamic string return value."""
    return to_hex(encode(["string"], [text]))


def abi_uint(*values: int) -> str:
    """ABI encode one or more uint256 words."""
    return to_hex(encode(["uint256"] * len(values), list(values)))


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


def transfer_log(
    token: str,
    sender: str,
    recipient: str,
    value: int,
    block: int,
    log_index: int = 0,
    transaction_hash: Optional[str] = None
) -> Dict[str, Any]:
    """Build a raw ERC20 Transfer log as returned by eth_getLogs."""
    return {
        "address": token,
        "topics": [TRANSFER_EVENT_TOPIC, address_to_topic(sender), address_to_topic(recipient)],
        "data": abi_uint(value),
        "blockNumber": hex(block),
        "logIndex": hex(log_index),
        "transactionHash": transaction_hash or tx_hash(block * 1000 + log_index),
    }


def curve_create_log(creator: str, token: str, block: int) -> Dict[str, Any]:
    """Build a raw CurveCreate log."""
    return {
        "address": "0xa7283d07812a02afb7c09b60f8896bcea3f90ace",
        "topics": [
            CURVE_CREATE_TOPIC,
            address_to_topic(creator),
            address_to_topic(token),
            address_to_topic(OTHER),
        ],
        "data": "0x",
        "blockNumber": hex(block),
        "logIndex": "0x0",
        "transactionHash": tx_hash(block),
    }


def dex_pair(
    token: str,
    name: str = "Dex Token",
    symbol: str = "DEX",
    price: str = "1.5",
    market_cap: Optional[float] = 1500.0,
    volume: float = 100.0,
    dex_id: str = "uniswap",
    chain_id: str = "monad",
    liquidity: float = 50_000.0,
    pair_address: Optional[str] = None
) -> Dict[str, Any]:
    """Build a DEXScreener pair payload."""
    return {
        "chainId": chain_id,
        "dexId": dex_id,
        "pairAddress": pair_address or f"pair-{token}",
        "baseToken": {"address": token, "name": name, "symbol": symbol},
        "quoteToken": {"address": "0x3bd359c1119da7da1d913d1c4d2b7c461115433a", "name": "Wrapped MON", "symbol": "WMON"},
        "priceUsd": price,
        "marketCap": market_cap,
        "fdv": 2000.0,
        "priceChange": {"h24": 12.5},
        "volume": {"h24": volume},
        "liquidity": {"usd": liquidity},
        "pairCreatedAt": 1_700_000_000_000,
        "info": {
            "imageUrl": "https://cdn.example/dex.png",
            "websites": [{"url": "https://dex.example"}],
            "socials": [
                {"type": "twitter", "url": "https://x.com/dex"},
                {"type": "telegram", "url": "https://t.me/dex"},
            ],
        },
    }


def make_token(address: str, **fields: Any) -> TokenRecord:
    """Build a TokenRecord with sensible defaults."""
    fields.setdefault("name", "Token")
    fields.setdefault("symbol", "TKN")
    fields.setdefault("created_at", datetime(2024, 1, 1, tzinfo=timezone.utc))
    return TokenRecord(address=address, **fields)


@pytest.fixture
def scan_config():
    """Scan configuration with small windows."""
    return ScanConfig(
        chunk_size=100,
        parallel_chunks=10,
        bonding_curve_window=1000,
        transfer_lookback=1000,
        max_discovered_tokens=200,
        token_batch_size=10,
        max_transfers=100,
        recent_transaction_blocks=20,
        recent_transaction_limit=50
    )


@pytest.fixture
def mock_rpc():
    """Create a mock RPC client."""
    rpc = AsyncMock(spec=RpcClient)
    rpc.get_block_number.return_value = 10_000
    rpc.get_logs.return_value = []
    rpc.eth_call.return_value = "0x"
    return rpc


@pytest.fixture
def sample_transaction():
    """A raw transaction object as returned by eth_getTransactionByHash."""
    return {
        "hash": tx_hash(1),
        "blockNumber": hex(500),
        "from": WALLET,
        "to": TOKEN_A,
        "value": "0x0",
        "gas": hex(60_000),
        "gasPrice": hex(50_000_000_000),
        "input": "0xa9059cbb" + "00" * 64,
    }
