"""Async JSON-RPC client for Monad nodes.

This module provides the core functionality for making JSON-RPC requests
against a pool of node endpoints, balanced round-robin.
"""

# Standard library imports
import itertools
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

# Third-party library imports
import httpx

# Internal imports
from monscreener.config import RpcConfig, get_rpc_config
from monscreener.logging_config import get_logger
from monscreener.utils.abi import hex_to_int, int_to_hex, to_hex
from monscreener.utils.errors import RpcConnectionError, RpcError
from monscreener.utils.retry import retry_with_backoff

# Get logger
logger = get_logger(__name__)

BlockParam = Union[int, str]
RpcCall = Tuple[str, Sequence[Any]]


def block_param(block: Optional[BlockParam]) -> str:
    """Encode a block number as a hex quantity; tags like 'latest' pass through."""
    if block is None:
        return "latest"
    if isinstance(block, int):
        return int_to_hex(block)
    return block


class RpcClient:
    """Client for a pool of Monad JSON-RPC endpoints.

    ``call`` and ``batch_call`` perform exactly one HTTP round trip and never
    retry. The typed ``get_*``/``eth_call`` helpers wrap ``call`` in the
    exponential backoff retrier, which skips retries for JSON-RPC error
    payloads.

    The round-robin index and request id counter belong to the instance;
    the client is meant to be shared by the services of one event loop.
    """

    def __init__(
        self,
        config: Optional[RpcConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the RPC client.

        Args:
            config: RPC configuration. Defaults to environment-based config.
            http_client: Optional pre-built HTTP client (tests inject one
                backed by ``httpx.MockTransport``)
        """
        self.config = config or get_rpc_config()
        self.endpoints: List[str] = list(self.config.endpoints)
        if not self.endpoints:
            raise ValueError("RpcClient requires at least one endpoint")
        self.headers = {"Content-Type": "application/json"}

        self._endpoint_index = 0
        self._request_ids = itertools.count(1)
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=self.config.timeout,
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
        )

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    def next_endpoint(self) -> str:
        """Return the next endpoint in round-robin order."""
        url = self.endpoints[self._endpoint_index]
        self._endpoint_index = (self._endpoint_index + 1) % len(self.endpoints)
        return url

    async def _post(self, payload: Any, method: str) -> Any:
        url = self.next_endpoint()
        try:
            response = await self._http_client.post(url, json=payload, headers=self.headers)
        except httpx.RequestError as e:
            raise RpcConnectionError(
                f"Connection error during RPC request to {url}: {str(e)}",
                method=method
            ) from e

        if not response.is_success:
            raise RpcError(
                f"RPC error: HTTP {response.status_code}",
                http_status=response.status_code,
                method=method
            )

        try:
            return response.json()
        except ValueError as e:
            raise RpcError(
                f"RPC error: invalid JSON from {url}",
                http_status=response.status_code,
                method=method
            ) from e

    async def call(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Make a single JSON-RPC request.

        Args:
            method: The RPC method to call
            params: Positional parameters

        Returns:
            The ``result`` member of the response

        Raises:
            RpcError: On non-2xx responses or a JSON-RPC error payload
            RpcConnectionError: On network failures and timeouts
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": list(params or [])
        }
        data = await self._post(payload, method)

        if not isinstance(data, dict):
            raise RpcError("RPC error: malformed response", method=method)

        error = data.get("error")
        if error is not None:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise RpcError(
                f"RPC error: {error.get('message', 'Unknown error')}",
                rpc_error=error,
                method=method
            )

        return data.get("result")

    async def batch_call(self, calls: Sequence[RpcCall]) -> List[Any]:
        """Send several requests as one JSON-RPC batch.

        Nodes may answer a batch in any order, so results are placed back
        by id (the index of the call). Entries that carry an error or are
        missing from the response come back as None.

        Args:
            calls: Ordered (method, params) pairs

        Returns:
            Results in the same order as ``calls``
        """
        if not calls:
            return []

        payload = [
            {"jsonrpc": "2.0", "id": index, "method": method, "params": list(params)}
            for index, (method, params) in enumerate(calls)
        ]
        data = await self._post(payload, "batch")

        if isinstance(data, dict) and data.get("error") is not None:
            error = data["error"] if isinstance(data["error"], dict) else {"message": str(data["error"])}
            raise RpcError(
                f"RPC batch error: {error.get('message', 'Unknown error')}",
                rpc_error=error,
                method="batch"
            )
        if not isinstance(data, list):
            raise RpcError("RPC batch error: malformed response", method="batch")

        results: List[Any] = [None] * len(calls)
        for entry in data:
            if not isinstance(entry, dict):
                continue
            index = entry.get("id")
            if not isinstance(index, int) or not 0 <= index < len(calls):
                continue
            if entry.get("error") is not None:
                logger.debug(f"Batch entry {index} ({calls[index][0]}) failed: {entry['error']}")
                continue
            results[index] = entry.get("result")

        return results

    async def request(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        """Make a JSON-RPC request with exponential backoff retries."""
        return await retry_with_backoff(
            lambda: self.call(method, params),
            max_attempts=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            operation_name=f"rpc.{method}"
        )

    async def get_balance(self, address: str, block: BlockParam = "latest") -> int:
        """Get the native balance of an address in wei."""
        result = await self.request("eth_getBalance", [address, block_param(block)])
        return hex_to_int(result)

    async def get_transaction_count(self, address: str, block: BlockParam = "latest") -> int:
        """Get the nonce of an address."""
        result = await self.request("eth_getTransactionCount", [address, block_param(block)])
        return hex_to_int(result)

    async def get_block_number(self) -> int:
        """Get the current head block number."""
        return hex_to_int(await self.request("eth_blockNumber", []))

    async def get_gas_price(self) -> int:
        """Get the current gas price in wei."""
        return hex_to_int(await self.request("eth_gasPrice", []))

    async def get_block(
        self,
        block: BlockParam = "latest",
        full_transactions: bool = False
    ) -> Optional[Dict[str, Any]]:
        """Get a block, optionally with full transaction objects."""
        return await self.request("eth_getBlockByNumber", [block_param(block), full_transactions])

    async def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Get a transaction by hash."""
        return await self.request("eth_getTransactionByHash", [tx_hash])

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Get a transaction receipt by hash."""
        return await self.request("eth_getTransactionReceipt", [tx_hash])

    async def eth_call(
        self,
        to: str,
        data: Union[bytes, str],
        block: BlockParam = "latest"
    ) -> str:
        """Execute a read-only contract call.

        Args:
            to: Contract address
            data: Calldata as bytes or 0x-prefixed hex
            block: Block tag or number

        Returns:
            Hex encoded return data
        """
        calldata = to_hex(data) if isinstance(data, bytes) else data
        return await self.request("eth_call", [{"to": to, "data": calldata}, block_param(block)])

    async def get_logs(
        self,
        from_block: BlockParam,
        to_block: BlockParam,
        address: Optional[Union[str, List[str]]] = None,
        topics: Optional[List[Optional[Union[str, List[str]]]]] = None
    ) -> List[Dict[str, Any]]:
        """Query event logs over a block range.

        Nodes cap the range per call; use ``LogScanner`` for wide windows.
        """
        log_filter: Dict[str, Any] = {
            "fromBlock": block_param(from_block),
            "toBlock": block_param(to_block)
        }
        if address is not None:
            log_filter["address"] = address
        if topics is not None:
            log_filter["topics"] = topics

        result = await self.request("eth_getLogs", [log_filter])
        return result or []
