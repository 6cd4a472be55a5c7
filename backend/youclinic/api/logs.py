"""
Activity log endpoints.

Reading the log is admin-only; any authenticated user can record their own
login and tab visits. Status changes are logged automatically on lead update.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.auth import get_staff_user, require_role
from ..core.database import get_db
from ..models.activity_log import ActivityLog, ActivityType
from ..models.user import User
from ..schemas.activity import ActivityLogResponse, TabVisitRequest
from ..schemas.common import PaginatedResponse, PaginationParams
from ..services.activity import ActivityLogger


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/logs", tags=["Activity Log"])


@router.get("", response_model=PaginatedResponse, dependencies=[Depends(require_role("admin"))])
async def list_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    type_filter: ActivityType | None = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    """All log entries, newest first."""
    params = PaginationParams(page=page, page_size=page_size)
    query = db.query(ActivityLog)
    if type_filter:
        query = query.filter(ActivityLog.type == type_filter)
    total = query.count()
    entries = (
        query.order_by(ActivityLog.created_at.desc())
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return PaginatedResponse.build(
        [ActivityLogResponse.model_validate(e) for e in entries], total, params
    )


@router.post("/login", response_model=ActivityLogResponse, status_code=status.HTTP_201_CREATED)
async def log_login(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    return ActivityLogResponse.model_validate(ActivityLogger(db).log_login(user))


@router.post("/tab-visit", response_model=ActivityLogResponse, status_code=status.HTTP_201_CREATED)
async def log_tab_visit(
    body: TabVisitRequest,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    return ActivityLogResponse.model_validate(ActivityLogger(db).log_tab_visit(user, body.tab))
