"""
SQLAlchemy ORM models for YouClinic CRM.

Importing this package registers every table on ``Base.metadata``.
"""

from .user import User, UserRole
from .lead import Lead, LeadFile, LeadStatus, ConsultationStatus, LeadSource
from .transfer import PatientTransfer, TransferNotification, TransferType, TransferStatus, NotificationType
from .activity_log import ActivityLog, ActivityType
from .calendar_event import CalendarEvent, EventPriority
from .proforma import ProformaInvoice

__all__ = [
    "User",
    "UserRole",
    # Lead model and enums
    "Lead",
    "LeadFile",
    "LeadStatus",
    "ConsultationStatus",
    "LeadSource",
    # Transfers
    "PatientTransfer",
    "TransferNotification",
    "TransferType",
    "TransferStatus",
    "NotificationType",
    # Activity log
    "ActivityLog",
    "ActivityType",
    # Calendar
    "CalendarEvent",
    "EventPriority",
    # Proforma
    "ProformaInvoice",
]
