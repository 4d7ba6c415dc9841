# schemas/session.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict

from app.models.user import UserRole


class SessionData(BaseModel):
    """Server-side session state, independent of how it is stored."""
    model_config = ConfigDict(from_attributes=True)

    token: str
    user_id: int
    name: str
    role: UserRole
    active_journal_id: Optional[int] = None
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
