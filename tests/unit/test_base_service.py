"""Unit tests for BaseService.

This module tests the base service functionality.
"""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from monscreener.services.base_service import BaseService


class TestBaseService:
    """Test suite for BaseService."""

    @pytest.fixture
    def base_service(self):
        """Create a BaseService instance for testing."""
        return BaseService()

    def test_default_logger_name(self, base_service):
        assert base_service.logger.name == "monscreener.BaseService"

    @pytest.mark.asyncio
    async def test_execute_with_fallback_success(self, base_service):
        """Test execute_with_fallback when the coroutine succeeds."""
        # Setup
        async def success_coro():
            return "success"

        # Execute
        result = await base_service.execute_with_fallback(
            success_coro(),
            fallback_value="fallback"
        )

        # Verify
        assert result == "success"

    @pytest.mark.asyncio
    async def test_execute_with_fallback_failure(self, base_service):
        """Test execute_with_fallback when the coroutine fails."""
        # Setup
        base_service.logger = MagicMock()

        async def fail_coro():
            raise ValueError("Test error")

        # Execute
        result = await base_service.execute_with_fallback(
            fail_coro(),
            fallback_value="fallback",
            error_message="Operation failed"
        )

        # Verify
        assert result == "fallback"
        base_service.logger.error.assert_called_once_with("Operation failed: Test error")

    @pytest.mark.asyncio
    async def test_execute_with_fallback_propagates_cancellation(self, base_service):
        """Cancellation is never turned into the fallback value."""
        async def cancelled_coro():
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await base_service.execute_with_fallback(cancelled_coro(), fallback_value=None)

    def test_log_with_context(self, base_service):
        """Test logging with context."""
        # Setup
        base_service.logger = MagicMock()

        # Execute
        base_service.log_with_context("info", "Test message", key1="value1", key2="value2")

        # Verify
        base_service.logger.info.assert_called_once()
        args, kwargs = base_service.logger.info.call_args
        assert args[0] == "Test message"
        assert kwargs["extra"]["context"] == {"key1": "value1", "key2": "value2"}

    @pytest.mark.asyncio
    async def test_log_timing_success(self, base_service, caplog):
        """Test timing logs on success."""
        with caplog.at_level(logging.INFO, logger="monscreener"):
            async with base_service.log_timing("test_operation"):
                await asyncio.sleep(0)

        assert "test_operation completed in" in caplog.text

    @pytest.mark.asyncio
    async def test_log_timing_failure(self, base_service, caplog):
        """Test timing logs when the block raises."""
        with caplog.at_level(logging.ERROR, logger="monscreener"):
            with pytest.raises(ValueError):
                async with base_service.log_timing("test_operation"):
                    raise ValueError("Test error")

        assert "test_operation failed after" in caplog.text
        assert "Test error" in caplog.text
