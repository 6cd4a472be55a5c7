"""
Proforma invoice model.
"""

import uuid

from sqlalchemy import Column, String, Text, Float, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from ..utils.dates import utcnow


class ProformaInvoice(Base):
    """
    A proforma issued to a patient.

    ``items`` is a JSON list of ``{"description": str, "amount": float}``.
    ``total`` and ``remaining`` are derived from items and deposit and are
    recomputed on every write.
    """

    __tablename__ = "proforma_invoices"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    invoice_number = Column(String(32), nullable=False, index=True)
    invoice_date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    items = Column(JSON, nullable=False, default=list)
    total = Column(Float, nullable=False, default=0.0)
    deposit = Column(Float, nullable=False, default=0.0)
    remaining = Column(Float, nullable=False, default=0.0)
    currency = Column(String(10), nullable=True)
    salesperson_phone = Column(String(50), nullable=False, default="")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), onupdate=utcnow)

    patient = relationship("Lead", lazy="joined")
