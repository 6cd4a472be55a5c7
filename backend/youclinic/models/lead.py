"""
Lead (patient) database model.

A lead moves through the sales pipeline via ``status``; once treatment is
done it leaves the main list and shows up in aftercare.
"""

import enum
import uuid

from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    Text,
    DateTime,
    ForeignKey,
    Index,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import column_property, relationship
from sqlalchemy.sql import func

from ..core.database import Base
from ..utils.dates import utcnow


# =============================================================================
# Enum Definitions
# =============================================================================

class LeadStatus(str, enum.Enum):
    """Pipeline status vocabulary."""
    NEW = "new"
    NEW_LEAD = "new_lead"
    NO_WHATSAPP = "no_whatsapp"
    ON_FOLLOW_UP = "on_follow_up"
    LIVE = "live"
    PASSIVE_LIVE = "passive_live"
    COLD = "cold"
    HOT = "hot"
    DEAD = "dead"
    NO_COMMUNICATION = "no_communication"
    NO_INTEREST = "no_interest"
    SOLD = "sold"
    CONVERTED = "converted"
    TREATMENT_DONE = "treatment_done"


# Statuses counted in the "sold" view.
SOLD_STATUSES = (LeadStatus.SOLD, LeadStatus.CONVERTED)

# Statuses reported individually by the stats endpoints.
STATS_STATUSES = (
    LeadStatus.NEW_LEAD,
    LeadStatus.NO_WHATSAPP,
    LeadStatus.ON_FOLLOW_UP,
    LeadStatus.LIVE,
    LeadStatus.PASSIVE_LIVE,
    LeadStatus.COLD,
    LeadStatus.HOT,
    LeadStatus.DEAD,
    LeadStatus.NO_COMMUNICATION,
    LeadStatus.NO_INTEREST,
    LeadStatus.SOLD,
)


class ConsultationStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class LeadSource(str, enum.Enum):
    """Known lead sources. The column itself accepts any string."""
    WEBSITE = "website"
    REFERRAL = "referral"
    SOCIAL_MEDIA = "social_media"
    ADVERTISEMENT = "advertisement"


def _enum_column(enum_cls, name: str, **kwargs) -> Column:
    return Column(
        SQLEnum(
            enum_cls,
            name=name,
            native_enum=False,
            length=32,
            values_callable=lambda e: [x.value for x in e],
        ),
        **kwargs,
    )


# =============================================================================
# Lead Model
# =============================================================================

class Lead(Base):
    """
    Patient / lead record.

    ``assigned_to`` is the owning salesperson and drives access scoping.
    ``sales_person`` is a display-name snapshot taken when the lead was
    created or imported.
    """

    __tablename__ = "leads"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Identity
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    phone = Column(String(50), nullable=False, index=True)
    country = Column(String(100), nullable=False, default="")

    # Sales context
    treatment_type = Column(String(100), nullable=False, default="")
    budget = Column(String(100), nullable=True)
    source = Column(String(50), nullable=False, default=LeadSource.WEBSITE.value)
    ad_name = Column(String(255), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    preferred_date = Column(String(20), nullable=True)
    medical_history = Column(Text, nullable=True)

    # Pipeline
    # active_history: the previous value is always loaded so status changes
    # can be compared at flush time
    status = column_property(
        _enum_column(LeadStatus, "lead_status", nullable=False, default=LeadStatus.NEW, index=True),
        active_history=True,
    )
    status_updated_at = Column(DateTime(timezone=True), nullable=True)
    treatment_done_at = Column(DateTime(timezone=True), nullable=True)
    next_follow_up_date = Column(String(10), nullable=True, index=True)
    follow_up_count = Column(Integer, nullable=False, default=0)

    # Ownership
    assigned_to = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    sales_person = Column(String(200), nullable=True)

    # Financial
    sale_date = Column(String(10), nullable=True)
    price = Column(Float, nullable=True)
    deposit = Column(Float, nullable=True)
    currency = Column(String(10), nullable=True)

    arrival_date = Column(String(10), nullable=True)

    # Consultations
    consultation1_date = Column(String(20), nullable=True)
    consultation1_status = _enum_column(ConsultationStatus, "consultation_status", nullable=True)
    consultation1_notes = Column(Text, nullable=True)
    consultation2_date = Column(String(20), nullable=True)
    consultation2_status = _enum_column(ConsultationStatus, "consultation_status", nullable=True)
    consultation2_notes = Column(Text, nullable=True)
    consultation3_date = Column(String(20), nullable=True)
    consultation3_status = _enum_column(ConsultationStatus, "consultation_status", nullable=True)
    consultation3_notes = Column(Text, nullable=True)
    consultation4_date = Column(String(20), nullable=True)
    consultation4_status = _enum_column(ConsultationStatus, "consultation_status", nullable=True)
    consultation4_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), onupdate=utcnow)

    files = relationship(
        "LeadFile",
        back_populates="lead",
        cascade="all, delete-orphan",
        order_by="LeadFile.uploaded_at",
        lazy="selectin",
    )
    assignee = relationship("User", lazy="joined")

    __table_args__ = (
        Index("ix_leads_assigned_status_created", "assigned_to", "status", "created_at"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, status={self.status})>"


# =============================================================================
# Lead Files
# =============================================================================

class LeadFile(Base):
    """Metadata for an object uploaded to storage and attached to a lead."""

    __tablename__ = "lead_files"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lead_id = Column(Uuid(as_uuid=True), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    file_id = Column(String(512), nullable=False, unique=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(100), nullable=False, default="application/octet-stream")
    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp())

    lead = relationship("Lead", back_populates="files")
