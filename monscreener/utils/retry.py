"""Exponential backoff retry for async operations."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from monscreener.utils.errors import is_retryable

T = TypeVar('T')

# Configure logger
logger = logging.getLogger(__name__)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    operation_name: str = "operation"
) -> T:
    """
    Execute an operation with bounded exponential backoff.

    The operation is invoked up to ``max_attempts`` times. After a failed
    attempt ``i`` (0-based) the retrier sleeps ``base_delay * 2 ** i``
    seconds, so three attempts with a 0.1s base wait 0.1s and then 0.2s.

    Args:
        operation: Zero-argument coroutine factory
        max_attempts: Maximum number of attempts, at least 1
        base_delay: Delay before the first retry in seconds
        should_retry: Predicate deciding whether an error may be retried
        operation_name: Name used in log messages

    Returns:
        Result of the first successful attempt

    Raises:
        The last error raised by the operation once attempts are exhausted,
        or the first error ``should_retry`` rejects.
    """
    attempts = max(1, max_attempts)
    last_exception: Optional[BaseException] = None

    for attempt in range(attempts):
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            last_exception = e
            if not should_retry(e):
                logger.debug(f"{operation_name} failed with non-retryable error: {str(e)}")
                raise
            if attempt < attempts - 1:
                wait_time = base_delay * (2 ** attempt)
                logger.warning(
                    f"{operation_name} failed (attempt {attempt + 1}/{attempts}), "
                    f"retrying in {wait_time:.2f}s: {str(e)}"
                )
                await asyncio.sleep(wait_time)
            else:
                logger.error(f"{operation_name} failed after {attempts} attempts: {str(e)}")

    raise last_exception
