# schemas/journal.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from app.models.journal import JournalRole


# =====================================================================
# JOURNALS
# =====================================================================

class JournalCreate(BaseModel):
    subject_name: str = Field(..., min_length=1, max_length=50)

    @field_validator("subject_name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class JournalUpdate(JournalCreate):
    pass


class JournalOut(BaseModel):
    """A journal as seen by one user, including that user's role on it."""
    id: int
    subject_name: str
    created_at: Optional[datetime] = None
    role: JournalRole
    last_accessed_at: Optional[datetime] = None


class JournalListResponse(BaseModel):
    journals: List[JournalOut]
    active_journal_id: Optional[int] = None


class ActiveJournalRequest(BaseModel):
    id: int = Field(..., gt=0)


class ActiveJournalResponse(BaseModel):
    success: bool = True
    active_journal_id: int


# =====================================================================
# THEME CONFIG
# =====================================================================

class ThemeConfig(BaseModel):
    """Per-user theme settings for a journal, stored as an opaque string."""
    config: str = Field(..., min_length=1, max_length=10_000)


# =====================================================================
# ACCESS GRANTS
# =====================================================================

class AccessGrantRequest(BaseModel):
    email: EmailStr
    role: JournalRole

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class AccessGrantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    name: str
    email: str
    role: JournalRole
    last_accessed_at: Optional[datetime] = None


class AccessGrantListResponse(BaseModel):
    grants: List[AccessGrantOut]
