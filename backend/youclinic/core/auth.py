"""
Authentication and authorisation dependencies for FastAPI routes.

Provides:
- get_current_user: extracts & verifies JWT, returns the User row
- resolve_role / can_access / scope_to_user: the single access policy
  shared by every resource (admin sees everything, salesperson sees
  only what is assigned to them)
- require_role(*roles): factory that returns a dependency enforcing role membership
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Query, Session

from .database import get_db
from .exceptions import ForbiddenError, InvalidRoleError, NotAuthenticatedError
from .security import decode_token
from ..models.user import User, UserRole


logger = logging.getLogger(__name__)

# The tokenUrl is informational (used by Swagger UI); actual login is POST /api/auth/login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Decode the JWT bearer token and return the authenticated User.

    The user is also stored on the session as the acting user so that
    flush-time hooks (status change logging) can attribute their writes.
    """
    if not token:
        raise NotAuthenticatedError()

    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        raise NotAuthenticatedError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise NotAuthenticatedError("Invalid token payload")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise NotAuthenticatedError("Invalid token payload")

    user = db.query(User).filter(User.id == user_uuid).first()
    if not user:
        raise NotAuthenticatedError("User not found")

    db.info["actor"] = user
    return user


# =============================================================================
# Access policy
# =============================================================================


def resolve_role(user: User) -> UserRole:
    """Return the user's role, raising InvalidRoleError for a missing or unknown value."""
    try:
        return UserRole(user.role)
    except ValueError:
        raise InvalidRoleError(f"Unknown role: {user.role!r}")


def can_access(user: User, owner_id: Optional[UUID]) -> bool:
    """Admins can access every record; salespersons only records assigned to them."""
    role = resolve_role(user)
    if role == UserRole.ADMIN:
        return True
    return owner_id is not None and owner_id == user.id


def ensure_access(user: User, owner_id: Optional[UUID], message: str = "Access denied") -> None:
    if not can_access(user, owner_id):
        raise ForbiddenError(message)


def scope_to_user(query: Query, user: User, owner_column) -> Query:
    """Apply the access policy to a query over records owned through ``owner_column``."""
    if resolve_role(user) == UserRole.ADMIN:
        return query
    return query.filter(owner_column == user.id)


def require_role(*allowed_roles: str):
    """
    Factory: returns a FastAPI dependency that checks the current user's role.

    Usage:
        @router.delete("/{id}", dependencies=[Depends(require_role("admin"))])
    """
    async def _check(user: User = Depends(get_current_user)) -> User:
        role = resolve_role(user)
        if role.value not in allowed_roles:
            raise ForbiddenError("You do not have permission to perform this action")
        return user

    return _check


async def get_staff_user(user: User = Depends(get_current_user)) -> User:
    """Any user holding a valid CRM role (admin or salesperson)."""
    resolve_role(user)
    return user
