# schemas/user_auth.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from app.models.user import UserRole


def _normalize_email(v: str) -> str:
    return v.strip().lower() if isinstance(v, str) else v


# =====================================================================
# 1. AUTH REQUESTS
# =====================================================================

class RegisterRequest(BaseModel):
    """Public registration payload."""
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    subject_name: Optional[str] = Field(None, max_length=50, description="Name for the default journal")

    @field_validator("name", "subject_name", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


class LoginRequest(BaseModel):
    """User login request."""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v)


# =====================================================================
# 2. READ SCHEMAS
# =====================================================================

class UserOut(BaseModel):
    """Public view of a user, used in admin listings."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: EmailStr
    role: UserRole
    created_at: Optional[datetime] = None


class SessionOut(BaseModel):
    """What the client is told about its own session."""
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    name: str
    role: UserRole
    active_journal_id: Optional[int] = None


class AuthResponse(BaseModel):
    message: str
    user: SessionOut


# =====================================================================
# 3. ADMIN UPDATES
# =====================================================================

class UserRoleUpdate(BaseModel):
    """Restricted update - role change (admin only)."""
    role: UserRole


# =====================================================================
# RESPONSE WRAPPERS
# =====================================================================

class SuccessResponse(BaseModel):
    """Generic success response."""
    success: bool = True
    message: str
