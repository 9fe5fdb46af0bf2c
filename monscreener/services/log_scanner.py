"""
Chunked event log scanning.

Monad nodes reject ``eth_getLogs`` ranges wider than about 100 blocks, so a
window is split into fixed-size chunks queried in bounded parallel groups.
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from monscreener.clients.rpc_client import RpcClient
from monscreener.services.base_service import BaseService
from monscreener.utils.batching import batch_process_requests

BlockRange = Tuple[int, int]
Topics = List[Optional[Union[str, List[str]]]]


def partition_range(from_block: int, to_block: int, chunk_size: int) -> List[BlockRange]:
    """
    Split ``[from_block, to_block]`` into inclusive chunks, head first.

    >>> partition_range(0, 249, 100)
    [(150, 249), (50, 149), (0, 49)]
    """
    if chunk_size < 1:
        raise ValueError("Chunk size must be positive")

    chunks: List[BlockRange] = []
    chunk_end = to_block
    while chunk_end >= from_block:
        chunk_start = max(chunk_end - chunk_size + 1, from_block)
        chunks.append((chunk_start, chunk_end))
        chunk_end = chunk_start - 1
    return chunks


class LogScanner(BaseService):
    """
    Paginates log queries over a block window.

    Chunks run ``parallelism`` at a time. A failed chunk contributes no
    entries and does not abort its siblings: partial results are preferred
    over none.
    """

    def __init__(self, rpc: RpcClient, chunk_size: int = 100, parallelism: int = 10):
        super().__init__()
        if chunk_size < 1 or parallelism < 1:
            raise ValueError("chunk_size and parallelism must be positive")
        self.rpc = rpc
        self.chunk_size = chunk_size
        self.parallelism = parallelism

    async def scan(
        self,
        from_block: int,
        to_block: int,
        address: Optional[Union[str, List[str]]] = None,
        topics: Optional[Topics] = None,
        stop_after: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Return the logs matching ``address``/``topics`` in the range.

        Chunks are queried from the head backwards, so when ``stop_after``
        cuts the scan short the result favours recent blocks. Within a chunk
        entries keep the node's order; chunks are concatenated head first.

        Args:
            from_block: First block, inclusive
            to_block: Last block, inclusive
            address: Contract address filter
            topics: Topic filter, ``None`` entries match anything
            stop_after: Skip remaining chunks once this many logs are collected

        Returns:
            Matching log entries
        """
        from_block = max(from_block, 0)
        if to_block < from_block:
            return []

        chunks = partition_range(from_block, to_block, self.chunk_size)

        async def query(chunk: BlockRange) -> List[Dict[str, Any]]:
            return await self.rpc.get_logs(chunk[0], chunk[1], address=address, topics=topics)

        def enough(outcomes) -> bool:
            if stop_after is None:
                return False
            return sum(len(o.value or []) for o in outcomes if o.ok) >= stop_after

        outcomes = await batch_process_requests(query, chunks, self.parallelism, stop_when=enough)

        logs: List[Dict[str, Any]] = []
        failed = 0
        for chunk, outcome in zip(chunks, outcomes):
            if not outcome.ok:
                failed += 1
                self.logger.debug(f"Log chunk {chunk[0]}-{chunk[1]} failed: {outcome.error}")
                continue
            logs.extend(outcome.value or [])

        self.logger.debug(
            f"Scanned {len(outcomes)}/{len(chunks)} chunks in {from_block}-{to_block}, "
            f"{failed} failed, {len(logs)} logs"
        )
        return logs
