"""
Database transaction management utilities.

Usage:
    with transaction(db):
        db.add(transfer)
        lead.assigned_to = new_owner
        # Commits on success, rolls back on error
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session

from .exceptions import CRMError


logger = logging.getLogger(__name__)


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """
    Context manager for database transactions with automatic rollback.

    All writes inside the block succeed together or fail together. Domain
    errors are rolled back quietly; anything else is logged before it
    propagates.
    """
    try:
        yield db
        db.commit()
        logger.debug("Transaction committed")
    except CRMError:
        db.rollback()
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction rolled back due to error: {e}")
        raise
