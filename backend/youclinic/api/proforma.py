"""
Proforma invoice endpoints.

JSON CRUD lives under /api/proformas. GET /api/proforma/{id} is the
printable link shared with patients: it redirects to the frontend view,
which renders the PDF.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..core.auth import ensure_access, get_staff_user
from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..core.transactions import transaction
from ..models.lead import Lead
from ..models.proforma import ProformaInvoice
from ..models.user import User
from ..schemas.common import SuccessResponse
from ..schemas.proforma import (
    ProformaCreate,
    ProformaListResponse,
    ProformaResponse,
    ProformaUpdate,
)
from ..services.invoice_number import generate_invoice_number
from ..services.proforma import compute_totals
from ..utils import dates


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/proformas", tags=["Proforma Invoices"])
link_router = APIRouter(prefix="/api/proforma", tags=["Proforma Invoices"])


def _get_patient(db: Session, patient_id: UUID, user: User) -> Lead:
    patient = db.query(Lead).filter(Lead.id == patient_id).first()
    if patient is None:
        raise NotFoundError("Patient not found")
    ensure_access(user, patient.assigned_to, "You do not have access to this patient")
    return patient


def _get_invoice(db: Session, invoice_id: UUID, user: User) -> ProformaInvoice:
    invoice = db.query(ProformaInvoice).filter(ProformaInvoice.id == invoice_id).first()
    if invoice is None:
        raise NotFoundError("Proforma invoice not found")
    ensure_access(user, invoice.patient.assigned_to, "You do not have access to this invoice")
    return invoice


@router.post("", response_model=ProformaResponse, status_code=status.HTTP_201_CREATED)
async def create_proforma(
    body: ProformaCreate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> ProformaResponse:
    """Issue a proforma dated today (clinic time) with computed totals."""
    patient = _get_patient(db, body.patient_id, user)
    items = [item.model_dump() for item in body.items]
    total, remaining = compute_totals(items, body.deposit)
    today = dates.clinic_today()

    with transaction(db):
        invoice = ProformaInvoice(
            patient_id=patient.id,
            created_by=user.id,
            invoice_number=generate_invoice_number(db, today),
            invoice_date=dates.iso_date(today),
            items=items,
            total=total,
            deposit=body.deposit,
            remaining=remaining,
            currency=body.currency,
            salesperson_phone=body.salesperson_phone or user.phone or "",
            notes=body.notes,
        )
        db.add(invoice)

    logger.info("Proforma %s issued for patient %s", invoice.invoice_number, patient.id)
    return ProformaResponse.model_validate(invoice)


@router.get("", response_model=ProformaListResponse)
async def list_proformas(
    patient_id: UUID = Query(...),
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
):
    _get_patient(db, patient_id, user)
    invoices = (
        db.query(ProformaInvoice)
        .filter(ProformaInvoice.patient_id == patient_id)
        .order_by(ProformaInvoice.created_at.desc())
        .all()
    )
    return ProformaListResponse(
        items=[ProformaResponse.model_validate(i) for i in invoices],
        total=len(invoices),
    )


@router.get("/{invoice_id}", response_model=ProformaResponse)
async def get_proforma(
    invoice_id: UUID,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> ProformaResponse:
    return ProformaResponse.model_validate(_get_invoice(db, invoice_id, user))


@router.patch("/{invoice_id}", response_model=ProformaResponse)
async def update_proforma(
    invoice_id: UUID,
    body: ProformaUpdate,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> ProformaResponse:
    """Update an invoice; totals are recomputed from the resulting items and deposit."""
    invoice = _get_invoice(db, invoice_id, user)
    updates = body.model_dump(exclude_unset=True)

    with transaction(db):
        if updates.get("items") is not None:
            invoice.items = updates["items"]
        if updates.get("deposit") is not None:
            invoice.deposit = updates["deposit"]
        for field in ("currency", "notes"):
            if field in updates:
                setattr(invoice, field, updates[field])
        if "salesperson_phone" in updates:
            invoice.salesperson_phone = updates["salesperson_phone"] or ""
        invoice.total, invoice.remaining = compute_totals(invoice.items, invoice.deposit)

    return ProformaResponse.model_validate(invoice)


@router.delete("/{invoice_id}", response_model=SuccessResponse)
async def delete_proforma(
    invoice_id: UUID,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    invoice = _get_invoice(db, invoice_id, user)
    with transaction(db):
        db.delete(invoice)
    return SuccessResponse(message="Proforma invoice deleted")


@link_router.get("/{invoice_id}", response_class=RedirectResponse, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def proforma_link(invoice_id: UUID, db: Session = Depends(get_db)):
    """Redirect a shared proforma link to the frontend print view."""
    exists = db.query(ProformaInvoice.id).filter(ProformaInvoice.id == invoice_id).first()
    if exists is None:
        raise NotFoundError("Proforma invoice not found")
    return RedirectResponse(
        url=f"{settings.frontend_url.rstrip('/')}/proforma/{invoice_id}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
