"""
Business logic services for YouClinic CRM.

Importing this package registers the activity log flush hook.
"""

from .activity import ActivityLogger
from .transfers import TransferService

__all__ = [
    "ActivityLogger",
    "TransferService",
]
