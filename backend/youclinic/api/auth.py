"""
Authentication endpoints: login, signup, refresh, me.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..core.auth import get_current_user
from ..core.database import get_db
from ..core.exceptions import DuplicateEmailError, NotAuthenticatedError
from ..core.security import decode_token, hash_password, token_pair_for, verify_password
from ..core.transactions import transaction
from ..models.user import User, UserRole, default_name_from_email
from ..schemas.user import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    SignupRequest,
    UserResponse,
)
from ..services.activity import ActivityLogger
from ..utils import dates


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _login_response(user: User) -> LoginResponse:
    access_token, refresh_token = token_pair_for(user)
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserResponse.model_validate(user),
    )


# =============================================================================
# Login
# =============================================================================


@router.post("/login", response_model=LoginResponse)
async def login(credentials: LoginRequest, request: Request, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate with email + password. Returns JWT access + refresh tokens and logs the login."""
    user = db.query(User).filter(User.email == credentials.email).first()

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning(
            f"Failed login attempt for email={credentials.email} "
            f"ip={request.client.host if request.client else 'unknown'}"
        )
        raise NotAuthenticatedError("Invalid email or password")

    with transaction(db):
        user.last_login = dates.utcnow()
        ActivityLogger(db).log_login(user, commit=False)

    return _login_response(user)


# =============================================================================
# Signup
# =============================================================================


@router.post("/signup", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """Self-service signup. New accounts are always salespersons."""
    if db.query(User.id).filter(User.email == body.email).first():
        raise DuplicateEmailError()

    with transaction(db):
        user = User(
            email=body.email,
            name=body.name or default_name_from_email(body.email),
            password_hash=hash_password(body.password),
            role=UserRole.SALESPERSON.value,
            last_login=dates.utcnow(),
        )
        db.add(user)
        db.flush()
        ActivityLogger(db).log_login(user, commit=False)

    logger.info(f"New salesperson signed up: {user.email}")
    return _login_response(user)


# =============================================================================
# Refresh Token
# =============================================================================


@router.post("/refresh", response_model=RefreshTokenResponse)
async def refresh_token(
    body: RefreshTokenRequest,
    db: Session = Depends(get_db),
) -> RefreshTokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    payload = decode_token(body.refresh_token)
    if payload is None or payload.get("type") != "refresh" or not payload.get("sub"):
        raise NotAuthenticatedError("Invalid or expired refresh token")

    user = db.query(User).filter(User.email == payload.get("email")).first()
    if not user or str(user.id) != payload["sub"]:
        raise NotAuthenticatedError("User not found")

    access_token, new_refresh_token = token_pair_for(user)
    return RefreshTokenResponse(access_token=access_token, refresh_token=new_refresh_token)


# =============================================================================
# Current User
# =============================================================================


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user's profile."""
    return UserResponse.model_validate(user)
