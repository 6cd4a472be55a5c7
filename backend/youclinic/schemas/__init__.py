"""
Pydantic validation schemas for YouClinic CRM.

Contains request/response DTOs with validation rules.
"""

from .common import (
    HealthResponse,
    ErrorResponse,
    PaginationParams,
    PaginatedResponse,
    SuccessResponse,
)
from .lead import LeadCreate, LeadUpdate, LeadResponse, LeadSummary, LeadStats

__all__ = [
    # Lead schemas
    "LeadCreate",
    "LeadUpdate",
    "LeadResponse",
    "LeadSummary",
    "LeadStats",
    # Common schemas
    "HealthResponse",
    "ErrorResponse",
    "PaginationParams",
    "PaginatedResponse",
    "SuccessResponse",
]
