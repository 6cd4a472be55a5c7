"""
Lead import webhook.

Advertising forms (via Zapier, Make or a custom bridge) POST leads to
/import-lead. Duplicate phone numbers are ignored and still answered with
200 "OK" so the sender does not retry.
"""

import logging
import secrets
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import ForbiddenError
from ..core.transactions import transaction
from ..models.lead import Lead, LeadSource, LeadStatus
from ..models.user import User


logger = logging.getLogger(__name__)
router = APIRouter(tags=["Webhooks"])


class ImportLeadPayload(BaseModel):
    """Body sent by the import bridge (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(default="", alias="fullName", max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    email: Optional[str] = Field(default="", max_length=255)
    assigned_to: Optional[UUID] = Field(default=None, alias="assignedTo")
    sales_person: Optional[str] = Field(default=None, alias="salesPerson", max_length=200)
    ad_name: Optional[str] = Field(default="", alias="adName", max_length=255)
    notes: Optional[str] = ""


def _split_full_name(full_name: str) -> tuple:
    """Split a full name into (first_name, last_name) on the first space."""
    if not full_name:
        return ("", "")
    parts = full_name.strip().split(" ", 1)
    first = parts[0]
    last = parts[1] if len(parts) > 1 else ""
    return (first, last)


def _resolve_assignee(db: Session, requested: Optional[UUID]) -> Optional[UUID]:
    """Use the requested user if it exists, else the configured default assignee."""
    if requested is not None:
        if db.query(User.id).filter(User.id == requested).first():
            return requested
        logger.warning("Import webhook: unknown assignee %s, using default", requested)

    if settings.import_default_assignee_email:
        default = (
            db.query(User.id)
            .filter(User.email == settings.import_default_assignee_email)
            .first()
        )
        if default:
            return default.id
        logger.warning("Import webhook: default assignee %s not found",
                       settings.import_default_assignee_email)
    return None


def _verify_key(x_webhook_key: Optional[str]) -> None:
    expected = settings.import_webhook_key
    if not expected:
        return
    if not x_webhook_key or not secrets.compare_digest(x_webhook_key, expected):
        logger.warning("Import webhook: invalid key")
        raise ForbiddenError("Invalid webhook key")


@router.post(
    "/import-lead",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Import Lead Webhook",
)
async def import_lead(
    payload: ImportLeadPayload,
    db: Session = Depends(get_db),
    x_webhook_key: Optional[str] = Header(default=None),
) -> PlainTextResponse:
    _verify_key(x_webhook_key)
    phone = payload.phone.strip()

    if db.query(Lead.id).filter(Lead.phone == phone).first():
        logger.info("Import webhook: duplicate phone, lead ignored")
        return PlainTextResponse("OK")

    first_name, last_name = _split_full_name(payload.full_name)
    with transaction(db):
        lead = Lead(
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            email=payload.email or "",
            country="",
            treatment_type="",
            source=LeadSource.ADVERTISEMENT.value,
            ad_name=payload.ad_name or "",
            notes=payload.notes or "",
            preferred_date="",
            medical_history="",
            status=LeadStatus.NEW,
            assigned_to=_resolve_assignee(db, payload.assigned_to),
            sales_person=payload.sales_person or settings.import_default_sales_person,
        )
        db.add(lead)

    logger.info("Import webhook: lead %s created (ad=%s)", lead.id, lead.ad_name)
    return PlainTextResponse("OK")
