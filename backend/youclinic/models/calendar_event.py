"""
Calendar event model: per-user reminders scheduled on a clinic-local day.
"""

import enum
import uuid

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index, Uuid, Enum as SQLEnum
from sqlalchemy.sql import func

from ..core.database import Base
from ..utils.dates import utcnow


class EventPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    event_date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    event_time = Column(String(5), nullable=False, default="")  # HH:MM
    priority = Column(
        SQLEnum(EventPriority, name="event_priority", native_enum=False, length=16,
                values_callable=lambda e: [x.value for x in e]),
        nullable=False,
        default=EventPriority.MEDIUM,
    )
    is_completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), onupdate=utcnow)

    __table_args__ = (
        Index("ix_calendar_events_user_date", "user_id", "event_date"),
    )
