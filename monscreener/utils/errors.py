"""
Error handling utilities for MonScreener.

This module defines the exception hierarchy shared by the clients,
services and API routes.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class HttpStatus:
    """HTTP status codes used by the error classes."""
    HTTP_400_BAD_REQUEST = 400
    HTTP_404_NOT_FOUND = 404
    HTTP_500_INTERNAL_SERVER_ERROR = 500
    HTTP_502_BAD_GATEWAY = 502
    HTTP_503_SERVICE_UNAVAILABLE = 503

status = HttpStatus


class ErrorCode(str, Enum):
    """Error codes for the MonScreener API."""

    # General errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # JSON-RPC errors
    RPC_ERROR = "RPC_ERROR"
    RPC_CONNECTION_ERROR = "RPC_CONNECTION_ERROR"

    # Upstream REST services
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response model."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class MonScreenerError(Exception):
    """Base exception for all MonScreener errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize a new MonScreener error.

        Args:
            message: Error message
            code: Error code
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return ErrorResponse(
            code=self.code.value,
            message=self.message,
            details=self.details or None
        ).model_dump()


class ValidationError(MonScreenerError):
    """Exception for validation errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class ResourceNotFoundError(MonScreenerError):
    """Exception for resource not found errors."""

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: str
    ):
        super().__init__(
            message=message,
            code=ErrorCode.RESOURCE_NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ConfigurationError(MonScreenerError):
    """Exception for invalid configuration."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details
        )


class ExternalServiceError(MonScreenerError):
    """Exception for errors from external REST services."""

    def __init__(
        self,
        message: str,
        service_name: str,
        http_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details["service_name"] = service_name
        if http_status is not None:
            error_details["http_status"] = http_status
        self.http_status = http_status

        super().__init__(
            message=message,
            code=ErrorCode.EXTERNAL_SERVICE_ERROR,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=error_details
        )


class RpcError(MonScreenerError):
    """
    Exception for JSON-RPC failures.

    Carries either the HTTP status of a failed transport round trip or the
    ``error`` member of a JSON-RPC response. The latter means the node
    rejected the request and retrying it is pointless.
    """

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        rpc_error: Optional[Dict[str, Any]] = None,
        method: Optional[str] = None,
        code: ErrorCode = ErrorCode.RPC_ERROR
    ):
        self.http_status = http_status
        self.rpc_error = rpc_error
        self.method = method
        details: Dict[str, Any] = {}
        if method:
            details["method"] = method
        if http_status is not None:
            details["http_status"] = http_status
        if rpc_error is not None:
            details["rpc_error"] = rpc_error

        super().__init__(
            message=message,
            code=code,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details=details
        )

    @property
    def is_protocol_error(self) -> bool:
        """True when the node answered with a JSON-RPC error payload."""
        return self.rpc_error is not None


class RpcConnectionError(RpcError):
    """Exception for network failures talking to an RPC endpoint."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None
    ):
        super().__init__(
            message=message,
            method=method,
            code=ErrorCode.RPC_CONNECTION_ERROR
        )


def is_retryable(error: BaseException) -> bool:
    """
    Decide whether an error is worth another attempt.

    Transport failures (5xx, 429, timeouts, connection errors) are retried.
    JSON-RPC error payloads and other 4xx answers from REST services are
    terminal for the call.
    """
    if isinstance(error, RpcError):
        return not error.is_protocol_error
    if isinstance(error, ExternalServiceError) and error.http_status is not None:
        return error.http_status == 429 or error.http_status >= 500
    return True
