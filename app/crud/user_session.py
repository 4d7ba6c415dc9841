# crud/user_session.py
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from app.models.user_session import UserSession
from app.schemas.session import SessionData


class SessionRepository(ABC):
    """Token-keyed session storage. Implementations must survive process restarts."""

    @abstractmethod
    def get(self, token: str) -> Optional[SessionData]:
        ...

    @abstractmethod
    def set(self, token: str, data: SessionData, ttl: timedelta) -> SessionData:
        ...

    @abstractmethod
    def delete(self, token: str) -> None:
        ...

    @abstractmethod
    def delete_for_user(self, user_id: int) -> int:
        ...

    @abstractmethod
    def purge_expired(self, now: datetime) -> int:
        ...


class SqlAlchemySessionRepository(SessionRepository):
    """Stores sessions in the `sessions` table of the relational store."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, token: str) -> Optional[SessionData]:
        row = self.db.query(UserSession).filter(UserSession.token == token).first()
        if row is None:
            return None
        return SessionData.model_validate(row)

    def set(self, token: str, data: SessionData, ttl: timedelta) -> SessionData:
        row = self.db.query(UserSession).filter(UserSession.token == token).first()
        if row is None:
            row = UserSession(token=token)
            self.db.add(row)

        row.user_id = data.user_id
        row.name = data.name
        row.role = data.role
        row.active_journal_id = data.active_journal_id
        row.created_at = data.created_at
        row.expires_at = data.created_at + ttl

        self.db.commit()
        self.db.refresh(row)
        return SessionData.model_validate(row)

    def delete(self, token: str) -> None:
        self.db.query(UserSession).filter(UserSession.token == token).delete()
        self.db.commit()

    def delete_for_user(self, user_id: int) -> int:
        count = self.db.query(UserSession).filter(UserSession.user_id == user_id).delete()
        self.db.commit()
        return count

    def purge_expired(self, now: datetime) -> int:
        count = self.db.query(UserSession).filter(UserSession.expires_at <= now).delete()
        self.db.commit()
        return count
