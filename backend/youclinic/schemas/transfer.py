"""
Pydantic schemas for patient transfer requests and notifications.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.transfer import NotificationType, TransferStatus, TransferType
from .lead import LeadSummary
from .user import UserSummary


class TransferCreate(BaseModel):
    patient_id: UUID
    to_user_id: UUID
    transfer_type: TransferType
    reason: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = Field(None, max_length=2000)


class TransferReject(BaseModel):
    rejection_reason: Optional[str] = Field(None, max_length=1000)


class TransferResponse(BaseModel):
    id: UUID
    patient_id: UUID
    from_user_id: UUID
    to_user_id: UUID
    transfer_type: TransferType
    status: TransferStatus
    reason: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    approved_at: Optional[datetime] = None
    approved_by: Optional[UUID] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[UUID] = None
    rejection_reason: Optional[str] = None

    patient: Optional[LeadSummary] = None
    from_user: Optional[UserSummary] = None
    to_user: Optional[UserSummary] = None
    approver: Optional[UserSummary] = None
    rejecter: Optional[UserSummary] = None

    model_config = {"from_attributes": True}


class TransferListResponse(BaseModel):
    items: List[TransferResponse]
    total: int


class NotificationResponse(BaseModel):
    id: UUID
    transfer_id: UUID
    type: NotificationType
    is_read: bool
    created_at: datetime
    transfer: Optional[TransferResponse] = None

    model_config = {"from_attributes": True}
