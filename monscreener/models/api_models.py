"""
API response models for the MonScreener API.

This module defines the response envelope shared by all endpoints.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field, model_validator

# Type variable for response data
T = TypeVar('T')


class StatusCode(str, Enum):
    """Status codes for API responses."""
    SUCCESS = "success"
    ERROR = "error"


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class PaginationInfo(BaseModel):
    """Pagination metadata for paginated responses."""
    page: int = Field(..., description="Current page number (1-indexed)")
    limit: int = Field(..., description="Number of items per page")
    total: int = Field(..., description="Total number of items available")
    next_page: Optional[int] = Field(None, description="Next page number, if available")
    prev_page: Optional[int] = Field(None, description="Previous page number, if available")

    @model_validator(mode="after")
    def compute_neighbours(self) -> "PaginationInfo":
        """Calculate next and previous page numbers from page, limit and total."""
        total_pages = (self.total + self.limit - 1) // self.limit if self.limit > 0 else 0
        self.next_page = self.page + 1 if self.page < total_pages else None
        self.prev_page = self.page - 1 if self.page > 1 else None
        return self


class ApiResponse(BaseModel, Generic[T]):
    """
    Standard API response model.

    This model is used as the base response format for all API endpoints.
    """
    status: StatusCode = Field(StatusCode.SUCCESS, description="Status of the response")
    success: bool = Field(True, description="Whether the request was successful")
    data: Optional[T] = Field(None, description="Response data payload")
    error: Optional[ErrorDetail] = Field(None, description="Error details if status is 'error'")
    pagination: Optional[PaginationInfo] = Field(None, description="Pagination metadata")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of the response"
    )

    @model_validator(mode="after")
    def check_status(self) -> "ApiResponse":
        """Keep ``success`` and ``error`` consistent with ``status``."""
        if self.status == StatusCode.ERROR and self.error is None:
            raise ValueError("Error details must be provided when status is 'error'")
        if self.status != StatusCode.ERROR and self.error is not None:
            raise ValueError("Error details should only be provided when status is 'error'")
        self.success = self.status == StatusCode.SUCCESS
        return self

    @classmethod
    def success_response(cls, data: Optional[T] = None,
                         pagination: Optional[PaginationInfo] = None) -> 'ApiResponse[T]':
        """Create a success response."""
        return cls(status=StatusCode.SUCCESS, data=data, pagination=pagination)

    @classmethod
    def error_response(cls,
                       message: str,
                       code: str = "INTERNAL_ERROR",
                       details: Optional[Dict[str, Any]] = None) -> 'ApiResponse[None]':
        """Create an error response."""
        return cls(
            status=StatusCode.ERROR,
            data=None,
            error=ErrorDetail(code=code, message=message, details=details)
        )
