"""
Patient transfer endpoints: requests, admin decisions and notifications.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..core.auth import get_staff_user, require_role
from ..core.database import get_db
from ..core.transactions import transaction
from ..models.transfer import TransferType
from ..models.user import User
from ..schemas.common import CountResponse
from ..schemas.lead import LeadSummary
from ..schemas.transfer import (
    NotificationResponse,
    TransferCreate,
    TransferListResponse,
    TransferReject,
    TransferResponse,
)
from ..services.transfers import TransferService


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/transfers", tags=["Transfers"])


def _list(transfers) -> TransferListResponse:
    return TransferListResponse(
        items=[TransferResponse.model_validate(t) for t in transfers],
        total=len(transfers),
    )


# =============================================================================
# Requests
# =============================================================================


@router.get("", response_model=TransferListResponse)
async def list_transfers(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    return _list(TransferService(db, user).list_requests())


@router.get("/history", response_model=TransferListResponse)
async def transfer_history(
    days: int = Query(7, ge=1, le=365),
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    return _list(TransferService(db, user).history(days))


@router.get("/search-patients", response_model=list[LeadSummary])
async def search_patients(
    q: str = Query("", max_length=200),
    transfer_type: TransferType = Query(...),
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    leads = TransferService(db, user).search_patients(q, transfer_type)
    return [LeadSummary.model_validate(lead) for lead in leads]


@router.post("", response_model=TransferResponse, status_code=status.HTTP_201_CREATED)
async def create_transfer(
    body: TransferCreate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> TransferResponse:
    with transaction(db):
        transfer = TransferService(db, user).create(
            patient_id=body.patient_id,
            to_user_id=body.to_user_id,
            transfer_type=body.transfer_type,
            reason=body.reason,
            notes=body.notes,
        )
    return TransferResponse.model_validate(transfer)


@router.post("/{transfer_id}/approve", response_model=TransferResponse)
async def approve_transfer(
    transfer_id: UUID,
    user: User = Depends(require_role("admin")),
    db: Session = Depends(get_db),
) -> TransferResponse:
    with transaction(db):
        transfer = TransferService(db, user).approve(transfer_id)
    db.refresh(transfer)
    return TransferResponse.model_validate(transfer)


@router.post("/{transfer_id}/reject", response_model=TransferResponse)
async def reject_transfer(
    transfer_id: UUID,
    body: TransferReject,
    user: User = Depends(require_role("admin")),
    db: Session = Depends(get_db),
) -> TransferResponse:
    with transaction(db):
        transfer = TransferService(db, user).reject(transfer_id, body.rejection_reason)
    db.refresh(transfer)
    return TransferResponse.model_validate(transfer)


# =============================================================================
# Notifications
# =============================================================================


@router.get("/notifications", response_model=list[NotificationResponse])
async def list_notifications(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    return [
        NotificationResponse.model_validate(n)
        for n in TransferService(db, user).notifications()
    ]


@router.get("/notifications/unread-count", response_model=CountResponse)
async def unread_notification_count(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    return CountResponse(count=TransferService(db, user).unread_count())


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> NotificationResponse:
    with transaction(db):
        notification = TransferService(db, user).mark_read(notification_id)
    return NotificationResponse.model_validate(notification)
