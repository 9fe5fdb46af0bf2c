"""Error handling utilities for API endpoints."""

import functools
from typing import Any, Awaitable, Callable

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from monscreener.logging_config import get_logger
from monscreener.models.api_models import ApiResponse
from monscreener.utils.abi import is_valid_address
from monscreener.utils.errors import ErrorCode, MonScreenerError, ValidationError, status

# Set up logger
logger = get_logger(__name__)


def error_body(message: str, code: str, details: Any = None) -> dict:
    """Render the error envelope as JSON-ready data."""
    return ApiResponse.error_response(message, code=code, details=details).model_dump(mode="json")


def handle_api_errors(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    """Decorator to turn service errors into HTTP errors with the error envelope.

    Args:
        func: The endpoint function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except HTTPException:
            raise
        except MonScreenerError as e:
            if e.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
                logger.error(f"{func.__name__} failed: {str(e)}")
            else:
                logger.warning(f"{func.__name__} rejected: {str(e)}")
            raise HTTPException(
                status_code=e.status_code,
                detail=error_body(e.message, e.code.value, e.details or None)
            )
        except Exception as e:
            logger.exception(f"Unexpected error in {func.__name__}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=error_body("An internal server error occurred", ErrorCode.UNKNOWN_ERROR.value)
            )

    return wrapper


def validate_address(address: str, field: str = "address") -> str:
    """
    Check a path or query address and return it lower-cased.

    Raises:
        ValidationError: If the value is not ``0x`` followed by 40 hex digits
    """
    if not is_valid_address(address):
        raise ValidationError(f"Invalid {field}: {address}", details={field: address})
    return address.lower()


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle exceptions that escaped every route decorator."""
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)
    if isinstance(exc, MonScreenerError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": error_body(exc.message, exc.code.value, exc.details or None)}
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": error_body("Internal server error", ErrorCode.UNKNOWN_ERROR.value)}
    )
