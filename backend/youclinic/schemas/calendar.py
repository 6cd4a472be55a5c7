"""
Pydantic schemas for calendar events.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.calendar_event import EventPriority

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$|^$"


class CalendarEventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    event_date: str = Field(..., pattern=DATE_PATTERN)
    event_time: str = Field(default="", pattern=TIME_PATTERN)
    priority: EventPriority = EventPriority.MEDIUM


class CalendarEventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    event_date: Optional[str] = Field(None, pattern=DATE_PATTERN)
    event_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    priority: Optional[EventPriority] = None
    is_completed: Optional[bool] = None


class CalendarEventResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    description: str
    event_date: str
    event_time: str
    priority: EventPriority
    is_completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CalendarEventListResponse(BaseModel):
    items: List[CalendarEventResponse]
    total: int


class CalendarStats(BaseModel):
    total: int
    today: int
    pending: int
    completed: int
    high_priority: int
    medium_priority: int
    low_priority: int


class CalendarEventComplete(BaseModel):
    is_completed: bool = True
