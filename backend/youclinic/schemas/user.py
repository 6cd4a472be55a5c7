"""
Pydantic schemas for user management and authentication.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


# =============================================================================
# User CRUD (defined first, referenced by auth responses below)
# =============================================================================


class UserResponse(BaseModel):
    id: UUID
    name: Optional[str] = None
    email: str
    role: Optional[str] = None
    phone: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    """Name/email pair embedded in other resources."""
    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    items: List[UserResponse]
    total: int


class SalespersonCreate(BaseModel):
    """Admin-only: provision a salesperson account with an initial password."""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)


class RoleUpdate(BaseModel):
    role: str = Field(..., pattern="^(admin|salesperson)$")


class PhoneUpdate(BaseModel):
    phone: str = Field(..., max_length=50)


# =============================================================================
# Auth Request / Response
# =============================================================================


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    name: Optional[str] = Field(None, max_length=200)


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class RefreshTokenResponse(BaseModel):
    access_token: str
    refresh_token: str
