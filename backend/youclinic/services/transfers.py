"""
Patient transfer workflow.

A salesperson either *gives* one of their patients to a colleague or asks
to *take* a colleague's patient. Requests stay ``pending`` until an admin
approves or rejects them; both outcomes are terminal. Every state change
emits a notification to the other party.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.auth import resolve_role
from ..core.exceptions import (
    DuplicateTransferError,
    ForbiddenError,
    InvalidTransferStateError,
    NotFoundError,
)
from ..models.lead import Lead
from ..models.transfer import (
    NotificationType,
    PatientTransfer,
    TransferNotification,
    TransferStatus,
    TransferType,
)
from ..models.user import User, UserRole
from ..utils import dates
from .search import filter_leads


logger = logging.getLogger(__name__)


class TransferService:
    """
    Transfer request operations for one acting user.

    Methods flush but never commit; the route wraps each call in
    ``transaction(db)``.
    """

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    # =========================================================================
    # Queries
    # =========================================================================

    def _visible(self):
        query = self.db.query(PatientTransfer)
        if resolve_role(self.user) != UserRole.ADMIN:
            query = query.filter(
                or_(
                    PatientTransfer.from_user_id == self.user.id,
                    PatientTransfer.to_user_id == self.user.id,
                )
            )
        return query

    def list_requests(self) -> list[PatientTransfer]:
        """Admins see every request; others see requests they sent or received."""
        return self._visible().order_by(PatientTransfer.created_at.desc()).all()

    def history(self, days: int = 7) -> list[PatientTransfer]:
        since = dates.utcnow() - timedelta(days=days)
        return (
            self._visible()
            .filter(PatientTransfer.created_at >= since)
            .order_by(PatientTransfer.created_at.desc())
            .all()
        )

    def search_patients(self, query: str, transfer_type: TransferType) -> list[Lead]:
        """``give`` searches the caller's own patients, ``take`` everybody else's."""
        resolve_role(self.user)
        leads = self.db.query(Lead)
        if TransferType(transfer_type) == TransferType.GIVE:
            leads = leads.filter(Lead.assigned_to == self.user.id)
        else:
            leads = leads.filter(or_(Lead.assigned_to != self.user.id, Lead.assigned_to.is_(None)))
        return filter_leads(leads.all(), query)

    def get(self, transfer_id: UUID) -> PatientTransfer:
        transfer = self.db.query(PatientTransfer).filter(PatientTransfer.id == transfer_id).first()
        if transfer is None:
            raise NotFoundError("Transfer request not found")
        return transfer

    # =========================================================================
    # Commands
    # =========================================================================

    def _notify(self, transfer: PatientTransfer, user_id: UUID, type_: NotificationType) -> None:
        self.db.add(TransferNotification(transfer_id=transfer.id, user_id=user_id, type=type_))

    def create(
        self,
        patient_id: UUID,
        to_user_id: UUID,
        transfer_type: TransferType,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> PatientTransfer:
        resolve_role(self.user)
        transfer_type = TransferType(transfer_type)

        patient = self.db.query(Lead).filter(Lead.id == patient_id).first()
        if patient is None:
            raise NotFoundError("Patient not found")
        to_user = self.db.query(User).filter(User.id == to_user_id).first()
        if to_user is None:
            raise NotFoundError("Target user not found")

        if transfer_type == TransferType.GIVE and patient.assigned_to != self.user.id:
            raise ForbiddenError("You can only transfer your own patients")
        if transfer_type == TransferType.TAKE and patient.assigned_to == self.user.id:
            raise ForbiddenError("You cannot request to take your own patient")

        existing = (
            self.db.query(PatientTransfer.id)
            .filter(
                PatientTransfer.patient_id == patient_id,
                PatientTransfer.from_user_id == self.user.id,
                PatientTransfer.to_user_id == to_user_id,
                PatientTransfer.status == TransferStatus.PENDING,
            )
            .first()
        )
        if existing is not None:
            raise DuplicateTransferError()

        transfer = PatientTransfer(
            patient_id=patient_id,
            from_user_id=self.user.id,
            to_user_id=to_user_id,
            transfer_type=transfer_type,
            status=TransferStatus.PENDING,
            reason=reason,
            notes=notes,
        )
        self.db.add(transfer)
        self.db.flush()
        self._notify(transfer, to_user_id, NotificationType.REQUEST_CREATED)

        logger.info(
            "Transfer %s created: %s patient %s from %s to %s",
            transfer.id, transfer_type.value, patient_id, self.user.id, to_user_id,
        )
        return transfer

    def _pending(self, transfer_id: UUID) -> PatientTransfer:
        transfer = self.get(transfer_id)
        if not transfer.is_pending:
            raise InvalidTransferStateError()
        return transfer

    def approve(self, transfer_id: UUID) -> PatientTransfer:
        """Reassign the patient according to the request direction."""
        transfer = self._pending(transfer_id)
        patient = self.db.query(Lead).filter(Lead.id == transfer.patient_id).first()
        if patient is None:
            raise NotFoundError("Patient not found")

        new_owner_id = (
            transfer.to_user_id
            if transfer.transfer_type == TransferType.GIVE
            else transfer.from_user_id
        )
        patient.assigned_to = new_owner_id

        transfer.status = TransferStatus.APPROVED
        transfer.approved_at = dates.utcnow()
        transfer.approved_by = self.user.id
        self._notify(transfer, transfer.from_user_id, NotificationType.REQUEST_APPROVED)

        logger.info("Transfer %s approved by %s; patient %s now assigned to %s",
                    transfer.id, self.user.id, patient.id, new_owner_id)
        return transfer

    def reject(self, transfer_id: UUID, reason: Optional[str] = None) -> PatientTransfer:
        transfer = self._pending(transfer_id)
        transfer.status = TransferStatus.REJECTED
        transfer.rejected_at = dates.utcnow()
        transfer.rejected_by = self.user.id
        transfer.rejection_reason = reason
        self._notify(transfer, transfer.from_user_id, NotificationType.REQUEST_REJECTED)

        logger.info("Transfer %s rejected by %s", transfer.id, self.user.id)
        return transfer

    # =========================================================================
    # Notifications
    # =========================================================================

    def notifications(self) -> list[TransferNotification]:
        return (
            self.db.query(TransferNotification)
            .filter(TransferNotification.user_id == self.user.id)
            .order_by(TransferNotification.created_at.desc())
            .all()
        )

    def mark_read(self, notification_id: UUID) -> TransferNotification:
        notification = (
            self.db.query(TransferNotification)
            .filter(TransferNotification.id == notification_id)
            .first()
        )
        if notification is None or notification.user_id != self.user.id:
            raise NotFoundError("Notification not found")
        notification.is_read = True
        return notification

    def unread_count(self) -> int:
        return (
            self.db.query(TransferNotification)
            .filter(
                TransferNotification.user_id == self.user.id,
                TransferNotification.is_read.is_(False),
            )
            .count()
        )
