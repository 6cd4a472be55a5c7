"""
Patient transfer requests and the notifications they emit.
"""

import enum
import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from ..utils.dates import utcnow


# =============================================================================
# Enum Definitions
# =============================================================================

class TransferType(str, enum.Enum):
    """``give``: caller hands their patient to someone else. ``take``: caller asks for someone else's patient."""
    GIVE = "give"
    TAKE = "take"


class TransferStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, enum.Enum):
    REQUEST_CREATED = "request_created"
    REQUEST_APPROVED = "request_approved"
    REQUEST_REJECTED = "request_rejected"


def _values(e):
    return [x.value for x in e]


# =============================================================================
# Transfer Request
# =============================================================================

class PatientTransfer(Base):
    __tablename__ = "patient_transfers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    from_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    to_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    transfer_type = Column(SQLEnum(TransferType, name="transfer_type", native_enum=False, length=16, values_callable=_values), nullable=False)
    status = Column(SQLEnum(TransferStatus, name="transfer_status", native_enum=False, length=16, values_callable=_values), nullable=False, default=TransferStatus.PENDING, index=True)
    reason = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), onupdate=utcnow)

    patient = relationship("Lead", lazy="joined")
    from_user = relationship("User", foreign_keys=[from_user_id], lazy="joined")
    to_user = relationship("User", foreign_keys=[to_user_id], lazy="joined")
    approver = relationship("User", foreign_keys=[approved_by], lazy="joined")
    rejecter = relationship("User", foreign_keys=[rejected_by], lazy="joined")

    @property
    def is_pending(self) -> bool:
        return self.status == TransferStatus.PENDING

    def __repr__(self) -> str:
        return f"<PatientTransfer(id={self.id}, type={self.transfer_type}, status={self.status})>"


# =============================================================================
# Notifications
# =============================================================================

class TransferNotification(Base):
    __tablename__ = "transfer_notifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transfer_id = Column(Uuid(as_uuid=True), ForeignKey("patient_transfers.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(NotificationType, name="notification_type", native_enum=False, length=32, values_callable=_values), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), index=True)

    transfer = relationship("PatientTransfer", lazy="joined")
