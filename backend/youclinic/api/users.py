"""
User management endpoints.

IMPORTANT: Static path routes (/me/phone, /salespersons) MUST be defined
BEFORE dynamic path routes (/{user_id}).
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..core.auth import get_current_user, get_staff_user, require_role
from ..core.database import get_db
from ..core.exceptions import DuplicateEmailError, ForbiddenError, NotFoundError
from ..core.security import hash_password
from ..core.transactions import transaction
from ..models.user import User, UserRole, default_name_from_email
from ..schemas.common import SuccessResponse
from ..schemas.user import (
    PhoneUpdate,
    RoleUpdate,
    SalespersonCreate,
    UserListResponse,
    UserResponse,
    UserSummary,
)


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["User Management"])


def _get_user(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFoundError("User not found")
    return user


# =============================================================================
# Lists
# =============================================================================


@router.get("", response_model=UserListResponse, dependencies=[Depends(require_role("admin"))])
async def list_users(db: Session = Depends(get_db)):
    users = db.query(User).order_by(User.created_at.desc()).all()
    return UserListResponse(items=[UserResponse.model_validate(u) for u in users], total=len(users))


@router.get("/salespersons", response_model=list[UserSummary])
async def list_salespersons(user: User = Depends(get_staff_user), db: Session = Depends(get_db)):
    """Salespersons, for assignment and transfer pickers."""
    users = (
        db.query(User)
        .filter(User.role == UserRole.SALESPERSON.value)
        .order_by(User.name.asc())
        .all()
    )
    return [UserSummary.model_validate(u) for u in users]


# =============================================================================
# Current user (MUST be before /{user_id})
# =============================================================================


@router.patch("/me/phone", response_model=UserResponse)
async def update_my_phone(
    body: PhoneUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Phone printed on the proformas this user issues."""
    with transaction(db):
        user.phone = body.phone.strip()
    return UserResponse.model_validate(user)


# =============================================================================
# Admin provisioning
# =============================================================================


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_role("admin"))])
async def create_salesperson(body: SalespersonCreate, db: Session = Depends(get_db)) -> UserResponse:
    """Create a salesperson account with an initial password."""
    if db.query(User.id).filter(User.email == body.email).first():
        raise DuplicateEmailError()

    with transaction(db):
        user = User(
            email=body.email,
            name=body.name or default_name_from_email(body.email),
            password_hash=hash_password(body.password),
            role=UserRole.SALESPERSON.value,
            phone=body.phone,
        )
        db.add(user)

    logger.info(f"Salesperson account created: {user.email}")
    return UserResponse.model_validate(user)


@router.patch("/{user_id}/role", response_model=UserResponse, dependencies=[Depends(require_role("admin"))])
async def update_role(user_id: UUID, body: RoleUpdate, db: Session = Depends(get_db)) -> UserResponse:
    user = _get_user(db, user_id)
    with transaction(db):
        user.role = body.role
    logger.info(f"Role of {user.email} set to {body.role}")
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_role("admin")),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Delete a user. Admin accounts cannot be deleted."""
    user = _get_user(db, user_id)
    if user.is_admin:
        raise ForbiddenError("Admin users cannot be deleted")

    with transaction(db):
        db.delete(user)
    logger.info(f"User {user.email} deleted by {admin.email}")
    return SuccessResponse(message="User deleted")
