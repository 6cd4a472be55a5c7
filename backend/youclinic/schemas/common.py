"""
Common Pydantic schemas shared across the application.

Contains health check, error, and pagination schemas.
"""

import math
from datetime import datetime
from typing import Optional, Generic, TypeVar, List, Any

from pydantic import BaseModel, Field


T = TypeVar("T")


# =============================================================================
# Health Check Schemas
# =============================================================================

class HealthResponse(BaseModel):
    """
    Health check response schema.

    Used by monitoring systems to verify service health.
    """

    status: str = Field(..., description="Overall health status (healthy, unhealthy)")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Current server timestamp")
    database: str = Field(..., description="Database connection status")
    environment: str = Field(..., description="Runtime environment")


# =============================================================================
# Error Schemas
# =============================================================================

class ErrorResponse(BaseModel):
    """
    Standard error response schema.

    Every domain error is rendered with this shape by the application's
    exception handlers.
    """

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": False,
                "error": "duplicate_phone",
                "message": "A patient with this phone number already exists",
            }
        }
    }


# =============================================================================
# Pagination Schemas
# =============================================================================

class PaginationParams(BaseModel):
    """
    Pagination parameters for list endpoints.
    """

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(default=20, ge=1, le=100, description="Number of items per page (max 100)")

    @property
    def offset(self) -> int:
        """Calculate offset for database query."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Generic paginated response wrapper.

    Wraps any list of items with pagination metadata.
    """

    items: List[Any] = Field(..., description="List of items for current page")
    total: int = Field(..., ge=0, description="Total number of items across all pages")
    page: int = Field(..., ge=1, description="Current page number")
    page_size: int = Field(..., ge=1, description="Number of items per page")
    total_pages: int = Field(..., ge=0, description="Total number of pages")
    has_next: bool = Field(..., description="Whether there is a next page")
    has_previous: bool = Field(..., description="Whether there is a previous page")

    @classmethod
    def build(cls, items: List[Any], total: int, params: PaginationParams) -> "PaginatedResponse":
        total_pages = math.ceil(total / params.page_size) if total else 0
        return cls(
            items=items,
            total=total,
            page=params.page,
            page_size=params.page_size,
            total_pages=total_pages,
            has_next=params.page < total_pages,
            has_previous=params.page > 1,
        )


# =============================================================================
# Success Response Schema
# =============================================================================

class SuccessResponse(BaseModel):
    """
    Generic success response for operations without specific return data.
    """

    success: bool = Field(default=True, description="Operation success status")
    message: str = Field(..., description="Success message")


class CountResponse(BaseModel):
    count: int
