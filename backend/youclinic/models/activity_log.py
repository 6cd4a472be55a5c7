"""
Activity log model.

Append-only record of logins, tab visits and lead status changes. There is
no update or delete path for these rows.
"""

import enum
import uuid

from sqlalchemy import Column, String, DateTime, JSON, Uuid, Enum as SQLEnum
from sqlalchemy.sql import func

from ..core.database import Base
from ..utils.dates import utcnow


class ActivityType(str, enum.Enum):
    LOGIN = "login"
    STATUS_UPDATE = "status_update"
    TAB_VISIT = "tab_visit"


class ActivityLog(Base):
    """
    One activity entry.

    Attributes:
        type: login, status_update or tab_visit
        user_id: acting user (not a foreign key, the row outlives the user);
            empty for system actions such as imports
        user_name: display name snapshot at the time of the action
        timestamp: ISO-8601 string in clinic time, seconds precision
        details: ``patient_id``, ``patient_name``, ``old_status``,
            ``new_status`` and ``tab`` keys, each optional
    """

    __tablename__ = "activity_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(
        SQLEnum(ActivityType, name="activity_type", native_enum=False, length=32,
                values_callable=lambda e: [x.value for x in e]),
        nullable=False,
        index=True,
    )
    user_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    user_name = Column(String(255), nullable=False, default="")
    timestamp = Column(String(40), nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), index=True)

    def __repr__(self) -> str:
        return f"<ActivityLog(id={self.id}, type={self.type}, user={self.user_name})>"
