"""
Pydantic schemas for proforma invoices.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field


class ProformaItem(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    amount: float


class ProformaCreate(BaseModel):
    patient_id: UUID
    items: List[ProformaItem] = []
    deposit: float = Field(default=0.0, ge=0)
    currency: Optional[str] = Field(None, max_length=10)
    salesperson_phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class ProformaUpdate(BaseModel):
    items: Optional[List[ProformaItem]] = None
    deposit: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=10)
    salesperson_phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class ProformaResponse(BaseModel):
    id: UUID
    patient_id: UUID
    created_by: Optional[UUID] = None
    invoice_number: str
    invoice_date: str
    items: List[ProformaItem]
    total: float
    deposit: float
    remaining: float
    currency: Optional[str] = None
    salesperson_phone: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProformaListResponse(BaseModel):
    items: List[ProformaResponse]
    total: int
