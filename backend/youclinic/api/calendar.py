"""
Calendar endpoints.

Events are private to their owner: another user's event is reported as
not found, for admins too.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.auth import get_staff_user
from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..core.transactions import transaction
from ..models.calendar_event import CalendarEvent, EventPriority
from ..models.user import User
from ..schemas.calendar import (
    DATE_PATTERN,
    CalendarEventComplete,
    CalendarEventCreate,
    CalendarEventListResponse,
    CalendarEventResponse,
    CalendarEventUpdate,
    CalendarStats,
)
from ..schemas.common import SuccessResponse
from ..utils import dates


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/calendar", tags=["Calendar"])


def _own_events(db: Session, user: User):
    return db.query(CalendarEvent).filter(CalendarEvent.user_id == user.id)


def _ordered(query) -> CalendarEventListResponse:
    events = query.order_by(CalendarEvent.event_date.asc(), CalendarEvent.event_time.asc()).all()
    return CalendarEventListResponse(
        items=[CalendarEventResponse.model_validate(e) for e in events],
        total=len(events),
    )


def _get_own_event(db: Session, event_id: UUID, user: User) -> CalendarEvent:
    event = _own_events(db, user).filter(CalendarEvent.id == event_id).first()
    if event is None:
        raise NotFoundError("Event not found or access denied")
    return event


# =============================================================================
# Queries
# =============================================================================


@router.get("", response_model=CalendarEventListResponse)
async def list_events(
    start_date: Optional[str] = Query(None, pattern=DATE_PATTERN),
    end_date: Optional[str] = Query(None, pattern=DATE_PATTERN),
    include_completed: bool = True,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    query = _own_events(db, user)
    if start_date:
        query = query.filter(CalendarEvent.event_date >= start_date)
    if end_date:
        query = query.filter(CalendarEvent.event_date <= end_date)
    if not include_completed:
        query = query.filter(CalendarEvent.is_completed.is_(False))
    return _ordered(query)


@router.get("/date/{event_date}", response_model=CalendarEventListResponse)
async def events_by_date(
    event_date: str,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    return _ordered(_own_events(db, user).filter(CalendarEvent.event_date == event_date))


@router.get("/today", response_model=CalendarEventListResponse)
async def events_today(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    today = dates.iso_date(dates.clinic_today())
    return _ordered(_own_events(db, user).filter(CalendarEvent.event_date == today))


@router.get("/week", response_model=CalendarEventListResponse)
async def events_this_week(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    """Sunday to Saturday of the current clinic week."""
    start, end = dates.week_bounds(dates.clinic_today())
    return _ordered(
        _own_events(db, user).filter(
            CalendarEvent.event_date >= dates.iso_date(start),
            CalendarEvent.event_date <= dates.iso_date(end),
        )
    )


@router.get("/pending", response_model=CalendarEventListResponse)
async def pending_events(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    return _ordered(_own_events(db, user).filter(CalendarEvent.is_completed.is_(False)))


@router.get("/stats", response_model=CalendarStats)
async def calendar_stats(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    events = _own_events(db, user).all()
    today = dates.iso_date(dates.clinic_today())
    pending = [e for e in events if not e.is_completed]
    return CalendarStats(
        total=len(events),
        today=sum(1 for e in events if e.event_date == today),
        pending=len(pending),
        completed=len(events) - len(pending),
        high_priority=sum(1 for e in pending if e.priority == EventPriority.HIGH),
        medium_priority=sum(1 for e in pending if e.priority == EventPriority.MEDIUM),
        low_priority=sum(1 for e in pending if e.priority == EventPriority.LOW),
    )


# =============================================================================
# Commands
# =============================================================================


@router.post("", response_model=CalendarEventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: CalendarEventCreate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> CalendarEventResponse:
    with transaction(db):
        event = CalendarEvent(user_id=user.id, is_completed=False, **body.model_dump())
        db.add(event)
    return CalendarEventResponse.model_validate(event)


@router.patch("/{event_id}", response_model=CalendarEventResponse)
async def update_event(
    event_id: UUID,
    body: CalendarEventUpdate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> CalendarEventResponse:
    event = _get_own_event(db, event_id, user)
    with transaction(db):
        for field, value in body.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(event, field, value)
    return CalendarEventResponse.model_validate(event)


@router.post("/{event_id}/complete", response_model=CalendarEventResponse)
async def complete_event(
    event_id: UUID,
    body: CalendarEventComplete,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> CalendarEventResponse:
    event = _get_own_event(db, event_id, user)
    with transaction(db):
        event.is_completed = body.is_completed
    return CalendarEventResponse.model_validate(event)


@router.delete("/{event_id}", response_model=SuccessResponse)
async def delete_event(
    event_id: UUID,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    event = _get_own_event(db, event_id, user)
    with transaction(db):
        db.delete(event)
    return SuccessResponse(message="Event deleted")
