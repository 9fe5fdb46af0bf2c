"""
Base service class for MonScreener services.

This module provides a base class for all services, with common
functionality for fallbacks, logging and timing.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Optional, TypeVar

T = TypeVar('T')


class BaseService:
    """
    Base service class with common functionality.

    This class provides:
    - Fallback execution for best-effort calls
    - Structured logging
    - Timing of long operations
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the base service.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(f"monscreener.{self.__class__.__name__}")

    async def execute_with_fallback(
        self,
        awaitable: Awaitable[T],
        fallback_value: T,
        error_message: str = "Operation failed"
    ) -> T:
        """
        Await a coroutine and return ``fallback_value`` if it raises.

        Args:
            awaitable: The coroutine to execute
            fallback_value: Value returned on failure
            error_message: Message logged on failure

        Returns:
            The coroutine's result or the fallback value
        """
        try:
            return await awaitable
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"{error_message}: {str(e)}")
            return fallback_value

    def log_with_context(self, level: str, message: str, **context: Any) -> None:
        """Log a message with structured context attached as ``extra``."""
        log_method = getattr(self.logger, level.lower(), self.logger.info)
        log_method(message, extra={"context": context})

    def log_timing(self, operation_name: str) -> "TimingContextManager":
        """
        Create a context manager to log timing information.

        Args:
            operation_name: Name of the operation

        Returns:
            Timing context manager
        """
        return TimingContextManager(operation_name, self.logger)


class TimingContextManager:
    """Context manager to log timing information."""

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.start_time = 0.0

    async def __aenter__(self) -> "TimingContextManager":
        self.start_time = time.monotonic()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = time.monotonic() - self.start_time
        if exc_val is not None:
            self.logger.error(
                f"{self.operation_name} failed after {elapsed:.2f}s: {str(exc_val)}"
            )
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed:.2f}s")
