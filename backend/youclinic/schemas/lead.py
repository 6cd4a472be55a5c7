"""
Pydantic schemas for leads, lead files and lead statistics.
"""

from datetime import datetime
from typing import Optional, List, Dict
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ..models.lead import ConsultationStatus, LeadStatus


# =============================================================================
# Create / Update
# =============================================================================


class LeadCreate(BaseModel):
    """Lead created from the CRM UI. Status always starts as ``new``."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(default="", max_length=100)
    email: str = Field(default="", max_length=255)
    phone: str = Field(..., min_length=1, max_length=50)
    country: str = Field(default="", max_length=100)
    treatment_type: str = Field(default="", max_length=100)
    budget: Optional[str] = Field(None, max_length=100)
    source: str = Field(default="website", max_length=50)
    ad_name: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    preferred_date: Optional[str] = Field(None, max_length=20)
    medical_history: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def strip_phone(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("phone must not be blank")
        return v


class LeadUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    country: Optional[str] = Field(None, max_length=100)
    treatment_type: Optional[str] = Field(None, max_length=100)
    budget: Optional[str] = Field(None, max_length=100)
    status: Optional[LeadStatus] = None
    source: Optional[str] = Field(None, max_length=50)
    ad_name: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    preferred_date: Optional[str] = Field(None, max_length=20)
    medical_history: Optional[str] = None
    sales_person: Optional[str] = Field(None, max_length=200)
    sale_date: Optional[str] = Field(None, max_length=10)
    price: Optional[float] = None
    deposit: Optional[float] = None
    currency: Optional[str] = Field(None, max_length=10)
    arrival_date: Optional[str] = Field(None, max_length=10)
    next_follow_up_date: Optional[str] = Field(None, max_length=10)
    follow_up_count: Optional[int] = Field(None, ge=0)
    consultation1_date: Optional[str] = None
    consultation1_status: Optional[ConsultationStatus] = None
    consultation1_notes: Optional[str] = None
    consultation2_date: Optional[str] = None
    consultation2_status: Optional[ConsultationStatus] = None
    consultation2_notes: Optional[str] = None
    consultation3_date: Optional[str] = None
    consultation3_status: Optional[ConsultationStatus] = None
    consultation3_notes: Optional[str] = None
    consultation4_date: Optional[str] = None
    consultation4_status: Optional[ConsultationStatus] = None
    consultation4_notes: Optional[str] = None

    @field_validator(
        "first_name", "last_name", "email", "phone", "country",
        "treatment_type", "source", "follow_up_count",
    )
    @classmethod
    def reject_null(cls, v):
        # NOT NULL columns: omit to leave unchanged.
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    @field_validator("phone")
    @classmethod
    def strip_phone(cls, v: str) -> str:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("phone must not be blank")
        return v


# =============================================================================
# Files
# =============================================================================


class UploadUrlRequest(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)


class UploadUrlResponse(BaseModel):
    upload_url: str
    file_id: str


class LeadFileCreate(BaseModel):
    file_id: str = Field(..., min_length=1, max_length=512)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_type: str = Field(default="application/octet-stream", max_length=100)


class LeadFileResponse(BaseModel):
    file_id: str
    file_name: str
    file_type: str
    uploaded_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Responses
# =============================================================================


class LeadResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    country: str
    treatment_type: str
    budget: Optional[str] = None
    status: LeadStatus
    source: str
    ad_name: Optional[str] = None
    notes: Optional[str] = None
    preferred_date: Optional[str] = None
    medical_history: Optional[str] = None
    assigned_to: Optional[UUID] = None
    sales_person: Optional[str] = None
    sale_date: Optional[str] = None
    price: Optional[float] = None
    deposit: Optional[float] = None
    currency: Optional[str] = None
    status_updated_at: Optional[datetime] = None
    treatment_done_at: Optional[datetime] = None
    next_follow_up_date: Optional[str] = None
    follow_up_count: int = 0
    arrival_date: Optional[str] = None
    consultation1_date: Optional[str] = None
    consultation1_status: Optional[ConsultationStatus] = None
    consultation1_notes: Optional[str] = None
    consultation2_date: Optional[str] = None
    consultation2_status: Optional[ConsultationStatus] = None
    consultation2_notes: Optional[str] = None
    consultation3_date: Optional[str] = None
    consultation3_status: Optional[ConsultationStatus] = None
    consultation3_notes: Optional[str] = None
    consultation4_date: Optional[str] = None
    consultation4_status: Optional[ConsultationStatus] = None
    consultation4_notes: Optional[str] = None
    files: List[LeadFileResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LeadSummary(BaseModel):
    """Compact lead shape used by search results and embedded in transfers."""
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    status: LeadStatus
    assigned_to: Optional[UUID] = None
    sales_person: Optional[str] = None

    model_config = {"from_attributes": True}


class LeadStats(BaseModel):
    """Total plus one counter per reported status."""
    total: int
    by_status: Dict[str, int]
