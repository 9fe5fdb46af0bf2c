"""Unit tests for the exponential backoff retrier."""

import asyncio
import time
from unittest.mock import AsyncMock, patch

import pytest

from monscreener.utils.errors import ExternalServiceError, RpcError
from monscreener.utils.retry import retry_with_backoff


def failing_then(result, failures, error=None):
    """Build an operation that fails ``failures`` times, then returns ``result``."""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise error or RpcError("boom", http_status=503)
        return result

    return operation, calls


@pytest.mark.asyncio
async def test_returns_first_success():
    operation, calls = failing_then("ok", 0)

    result = await retry_with_backoff(operation, max_attempts=3, base_delay=0.01)

    assert result == "ok"
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_sleeps_double_the_delay_between_attempts():
    operation, calls = failing_then("ok", 2)

    with patch("monscreener.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        result = await retry_with_backoff(operation, max_attempts=3, base_delay=0.1)

    assert result == "ok"
    assert calls["count"] == 3
    assert [c.args[0] for c in sleep.await_args_list] == pytest.approx([0.1, 0.2])


@pytest.mark.asyncio
async def test_total_wait_is_sum_of_backoffs():
    operation, _ = failing_then("ok", 2)

    start = time.monotonic()
    await retry_with_backoff(operation, max_attempts=3, base_delay=0.1)
    elapsed = time.monotonic() - start

    assert elapsed >= 0.29


@pytest.mark.asyncio
async def test_reraises_last_error_when_exhausted():
    operation, calls = failing_then("never", 5)

    with patch("monscreener.utils.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        with pytest.raises(RpcError):
            await retry_with_backoff(operation, max_attempts=3, base_delay=0.1)

    assert calls["count"] == 3
    # No sleep after the final attempt
    assert sleep.await_count == 2


@pytest.mark.asyncio
async def test_protocol_errors_are_not_retried():
    error = RpcError("execution reverted", rpc_error={"code": 3, "message": "execution reverted"})
    operation, calls = failing_then("never", 5, error=error)

    with pytest.raises(RpcError) as exc_info:
        await retry_with_backoff(operation, max_attempts=3, base_delay=0.01)

    assert exc_info.value is error
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_client_errors_from_rest_services_are_not_retried():
    error = ExternalServiceError("not found", service_name="dexscreener", http_status=404)
    operation, calls = failing_then("never", 5, error=error)

    with pytest.raises(ExternalServiceError):
        await retry_with_backoff(operation, max_attempts=3, base_delay=0.01)

    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_rate_limited_rest_calls_are_retried():
    error = ExternalServiceError("slow down", service_name="dexscreener", http_status=429)
    operation, calls = failing_then("ok", 1, error=error)

    result = await retry_with_backoff(operation, max_attempts=3, base_delay=0.01)

    assert result == "ok"
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_cancellation_is_not_retried():
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await retry_with_backoff(operation, max_attempts=3, base_delay=0.01)

    assert calls["count"] == 1
