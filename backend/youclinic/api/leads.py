"""
Lead management endpoints.

Every route resolves the caller first and applies the access policy from
``core.auth``: admins work on all leads, salespersons only on leads
assigned to them.

IMPORTANT: Static path routes (/sold, /stats, /search, ...) MUST be defined
BEFORE the dynamic /{lead_id} routes.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..core.auth import ensure_access, get_staff_user, require_role, scope_to_user
from ..core.database import get_db
from ..core.exceptions import DuplicateFileError, DuplicatePhoneError, ForbiddenError, NotFoundError
from ..core.transactions import transaction
from ..models.lead import Lead, LeadFile, LeadStatus, SOLD_STATUSES, STATS_STATUSES
from ..models.user import User
from ..schemas.common import PaginatedResponse, PaginationParams, SuccessResponse
from ..schemas.lead import (
    LeadCreate,
    LeadFileCreate,
    LeadFileResponse,
    LeadResponse,
    LeadStats,
    LeadSummary,
    LeadUpdate,
    UploadUrlRequest,
    UploadUrlResponse,
)
from ..services.lead_status import apply_lead_update
from ..services.search import filter_leads
from ..services.storage import FileStorage, generate_object_key, get_storage


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/leads", tags=["Leads"])


# =============================================================================
# Helpers
# =============================================================================


def _scoped(db: Session, user: User):
    return scope_to_user(db.query(Lead), user, Lead.assigned_to)


def _paginate(query, page: int, page_size: int) -> PaginatedResponse:
    params = PaginationParams(page=page, page_size=page_size)
    total = query.count()
    leads = (
        query.order_by(Lead.created_at.desc())
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return PaginatedResponse.build(
        [LeadResponse.model_validate(lead) for lead in leads], total, params
    )


def _stats(query) -> LeadStats:
    rows = query.with_entities(Lead.status, func.count(Lead.id)).group_by(Lead.status).all()
    counts = {getattr(s, "value", s): n for s, n in rows}
    return LeadStats(
        total=sum(counts.values()),
        by_status={s.value: counts.get(s.value, 0) for s in STATS_STATUSES},
    )


def get_lead_for_user(db: Session, lead_id: UUID, user: User) -> Lead:
    """Load a lead and enforce the access policy on it."""
    lead = db.query(Lead).filter(Lead.id == lead_id).first()
    if lead is None:
        raise NotFoundError("Lead not found")
    ensure_access(user, lead.assigned_to, "You do not have access to this lead")
    return lead


# =============================================================================
# Lists
# =============================================================================


@router.get("", response_model=PaginatedResponse)
async def list_leads(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    treatment_type: Optional[str] = None,
    assigned_to: Optional[UUID] = None,
    follow_up_date: Optional[str] = None,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    """
    Main lead list, newest first.

    Leads whose treatment is done are excluded (they live in aftercare).
    ``assigned_to`` only narrows the result further; it never widens a
    salesperson's scope.
    """
    query = _scoped(db, user).filter(Lead.status != LeadStatus.TREATMENT_DONE)
    if status_filter:
        query = query.filter(Lead.status == status_filter)
    if treatment_type:
        query = query.filter(Lead.treatment_type == treatment_type)
    if assigned_to:
        query = query.filter(Lead.assigned_to == assigned_to)
    if follow_up_date:
        query = query.filter(Lead.next_follow_up_date == follow_up_date)
    return _paginate(query, page, page_size)


@router.get("/sold", response_model=list[LeadResponse])
async def list_sold(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    """Sold and converted leads."""
    leads = (
        _scoped(db, user)
        .filter(Lead.status.in_(SOLD_STATUSES))
        .order_by(Lead.created_at.desc())
        .all()
    )
    return [LeadResponse.model_validate(lead) for lead in leads]


@router.get("/aftercare", response_model=list[LeadResponse])
async def list_aftercare(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    """Patients whose treatment is done."""
    leads = (
        _scoped(db, user)
        .filter(Lead.status == LeadStatus.TREATMENT_DONE)
        .order_by(Lead.created_at.desc())
        .all()
    )
    return [LeadResponse.model_validate(lead) for lead in leads]


@router.get("/dashboard", response_model=list[LeadResponse])
async def dashboard_leads(
    limit: int = Query(10, ge=1, le=100),
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    leads = _scoped(db, user).order_by(Lead.created_at.desc()).limit(limit).all()
    return [LeadResponse.model_validate(lead) for lead in leads]


@router.get("/marketing", response_model=PaginatedResponse)
async def marketing_leads(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    ad_name: Optional[str] = None,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    """All leads in scope including aftercare, optionally narrowed to one ad."""
    query = _scoped(db, user)
    if ad_name:
        query = query.filter(Lead.ad_name == ad_name)
    return _paginate(query, page, page_size)


# =============================================================================
# Stats & Search
# =============================================================================


@router.get("/stats", response_model=LeadStats)
async def lead_stats(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    return _stats(_scoped(db, user))


@router.get("/stats/{user_id}", response_model=LeadStats, dependencies=[Depends(require_role("admin"))])
async def lead_stats_for_user(user_id: UUID, db: Session = Depends(get_db)):
    return _stats(db.query(Lead).filter(Lead.assigned_to == user_id))


@router.get("/search", response_model=list[LeadSummary])
async def search_leads(
    q: str = Query("", max_length=200),
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    """Name, email, country or phone search within the caller's scope."""
    if not q.strip():
        return []
    matches = filter_leads(_scoped(db, user).order_by(Lead.created_at.desc()).all(), q)
    return [LeadSummary.model_validate(lead) for lead in matches]


# =============================================================================
# CRUD
# =============================================================================


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    body: LeadCreate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> LeadResponse:
    """Create a lead assigned to the caller. Phone numbers must be unique."""
    if db.query(Lead.id).filter(Lead.phone == body.phone).first():
        raise DuplicatePhoneError()

    with transaction(db):
        lead = Lead(
            **body.model_dump(),
            status=LeadStatus.NEW,
            assigned_to=user.id,
            sales_person=user.display_name,
        )
        db.add(lead)

    logger.info("Lead %s created by %s", lead.id, user.id)
    return LeadResponse.model_validate(lead)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: UUID,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> LeadResponse:
    return LeadResponse.model_validate(get_lead_for_user(db, lead_id, user))


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: UUID,
    body: LeadUpdate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> LeadResponse:
    """Partial update. Status changes trigger their side effects and are logged on flush."""
    lead = get_lead_for_user(db, lead_id, user)
    with transaction(db):
        apply_lead_update(lead, body.model_dump(exclude_unset=True))
    return LeadResponse.model_validate(lead)


@router.delete("/{lead_id}", response_model=SuccessResponse)
async def delete_lead(
    lead_id: UUID,
    user: User = Depends(require_role("admin")),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> SuccessResponse:
    """
    Delete a lead and its attachments.

    The row is deleted first; objects are removed from storage afterwards.
    A storage failure leaves an orphaned object, never a dangling reference.
    """
    lead = db.query(Lead).filter(Lead.id == lead_id).first()
    if lead is None:
        raise NotFoundError("Lead not found")

    object_keys = [f.file_id for f in lead.files]
    with transaction(db):
        db.delete(lead)

    failed = storage.delete_many(object_keys)
    logger.info("Lead %s deleted by %s (%d files, %d orphaned)",
                lead_id, user.id, len(object_keys), len(failed))
    return SuccessResponse(message="Lead deleted")


# =============================================================================
# Files
# =============================================================================


@router.post("/{lead_id}/files/upload-url", response_model=UploadUrlResponse)
async def create_upload_url(
    lead_id: UUID,
    body: UploadUrlRequest,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> UploadUrlResponse:
    """Step one of an upload: a presigned PUT URL for a fresh object key."""
    get_lead_for_user(db, lead_id, user)
    file_id = generate_object_key(f"leads/{lead_id}", body.file_name)
    return UploadUrlResponse(upload_url=storage.upload_url(file_id), file_id=file_id)


@router.post("/{lead_id}/files", response_model=LeadFileResponse, status_code=status.HTTP_201_CREATED)
async def add_file(
    lead_id: UUID,
    body: LeadFileCreate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> LeadFileResponse:
    """Step two: register an uploaded object on the lead."""
    lead = get_lead_for_user(db, lead_id, user)
    if not body.file_id.startswith(f"leads/{lead.id}/"):
        raise ForbiddenError("File was not issued for this lead")
    if db.query(LeadFile).filter(LeadFile.file_id == body.file_id).first() is not None:
        raise DuplicateFileError()

    with transaction(db):
        lead_file = LeadFile(
            lead_id=lead.id,
            file_id=body.file_id,
            file_name=body.file_name,
            file_type=body.file_type,
        )
        db.add(lead_file)
    return LeadFileResponse.model_validate(lead_file)


@router.delete("/{lead_id}/files/{file_id:path}", response_model=SuccessResponse)
async def remove_file(
    lead_id: UUID,
    file_id: str,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> SuccessResponse:
    get_lead_for_user(db, lead_id, user)
    lead_file = (
        db.query(LeadFile)
        .filter(LeadFile.lead_id == lead_id, LeadFile.file_id == file_id)
        .first()
    )
    if lead_file is None:
        raise NotFoundError("File not found")

    with transaction(db):
        db.delete(lead_file)
    storage.delete_many([file_id])
    return SuccessResponse(message="File removed")
