"""
Proforma invoice number generation.

Numbers have the format PRO-YYYYMMDD-NNN where NNN is one more than the
count of invoices already issued on that invoice date.

Note: two invoices created concurrently for the same day can receive the
same number. Numbers are not unique-constrained; see DESIGN.md.
"""

import re
from datetime import date

from sqlalchemy.orm import Session

from ..models.proforma import ProformaInvoice


INVOICE_PREFIX = "PRO"
_INVOICE_PATTERN = re.compile(r"^PRO-\d{8}-\d{3,}$")


def generate_invoice_number(db: Session, invoice_date: date) -> str:
    """
    Generate the next invoice number for ``invoice_date``.

    Example:
        >>> generate_invoice_number(db, date(2024, 3, 5))
        "PRO-20240305-001"
    """
    issued = (
        db.query(ProformaInvoice)
        .filter(ProformaInvoice.invoice_date == invoice_date.isoformat())
        .count()
    )
    return f"{INVOICE_PREFIX}-{invoice_date.strftime('%Y%m%d')}-{issued + 1:03d}"


def validate_invoice_number_format(invoice_number: str) -> bool:
    """
    Validate that an invoice number follows the PRO-YYYYMMDD-NNN format.

    >>> validate_invoice_number_format("PRO-20240305-001")
    True
    >>> validate_invoice_number_format("INVALID")
    False
    """
    return bool(_INVOICE_PATTERN.match(invoice_number))
