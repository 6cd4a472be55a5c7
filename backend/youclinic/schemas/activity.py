"""
Pydantic schemas for the activity log.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.activity_log import ActivityType


class ActivityLogResponse(BaseModel):
    id: UUID
    type: ActivityType
    user_id: Optional[UUID] = None
    user_name: str
    timestamp: str
    details: Dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}


class TabVisitRequest(BaseModel):
    tab: str = Field(..., min_length=1, max_length=100)
