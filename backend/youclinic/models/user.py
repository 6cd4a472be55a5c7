"""
User model for authentication and role-scoped access.
"""

import enum
import uuid

from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func

from ..core.database import Base
from ..utils.dates import utcnow


# =============================================================================
# Enums
# =============================================================================


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    SALESPERSON = "salesperson"


# =============================================================================
# User Model
# =============================================================================


class User(Base):
    """
    A CRM user.

    ``role`` is stored as a plain nullable string: accounts can exist
    without a recognised role, and the access policy rejects them
    (see ``core.auth.resolve_role``).
    """

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    role = Column(String(50), nullable=True, default=UserRole.SALESPERSON.value)
    phone = Column(String(50), nullable=True)
    auth_id = Column(String(255), nullable=True, index=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.current_timestamp(), onupdate=utcnow)

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


def default_name_from_email(email: str) -> str:
    """'jane.doe@clinic.com' -> 'jane doe'."""
    return email.split("@", 1)[0].replace(".", " ")
