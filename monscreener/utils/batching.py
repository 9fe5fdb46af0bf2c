"""Batching utilities for MonScreener.

Upstream nodes and APIs are rate limited, so fan-out is done in fixed-size
groups: every item of a group runs concurrently and the next group starts
only once the previous one has finished.
"""

import asyncio
from typing import Awaitable, Callable, Iterator, List, Optional, Sequence, TypeVar

from monscreener.utils.outcome import Outcome, capture

# Type variables for generic types
T = TypeVar('T')  # Input type
R = TypeVar('R')  # Result type


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` of at most ``size`` elements."""
    if size < 1:
        raise ValueError("Chunk size must be positive")
    for i in range(0, len(items), size):
        yield items[i:i + size]


async def batch_process_requests(
    processor: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    batch_size: int = 10,
    stop_when: Optional[Callable[[List[Outcome[R]]], bool]] = None
) -> List[Outcome[R]]:
    """
    Process items in sequential groups of concurrent requests.

    Each item's failure is captured in its own Outcome and never cancels
    sibling requests.

    Args:
        processor: Async function to process each item
        items: Items to process
        batch_size: Number of concurrent requests per group
        stop_when: Optional predicate over the outcomes gathered so far;
            when it returns True after a group, remaining items are skipped

    Returns:
        Outcomes in input order, for the items that were processed
    """
    outcomes: List[Outcome[R]] = []

    for batch in chunked(items, batch_size):
        batch_outcomes = await asyncio.gather(*[capture(processor(item)) for item in batch])
        outcomes.extend(batch_outcomes)

        if stop_when is not None and stop_when(outcomes):
            break

    return outcomes
