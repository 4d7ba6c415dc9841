# services/session.py
"""
Server-side session management.

Sessions are opaque random tokens mapped to a small identity record
{user_id, name, role, active_journal_id}. They expire a fixed time after
creation; using a session does not extend it.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.core.clock import utcnow
from app.crud.user_session import SessionRepository
from app.models.user import User
from app.schemas.session import SessionData

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


class SessionManager:
    """Creates, resolves and destroys sessions through a SessionRepository."""

    def __init__(
        self,
        repository: SessionRepository,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = utcnow,
        active_journal_resolver: Optional[Callable[[int], Optional[int]]] = None,
    ):
        self.repository = repository
        self.ttl = ttl
        self.clock = clock
        self.active_journal_resolver = active_journal_resolver

    @staticmethod
    def new_token() -> str:
        return secrets.token_urlsafe(32)

    def create_session(self, user: User) -> SessionData:
        """
        Bind a fresh session to *user*.

        The active journal defaults to the user's most recently accessed
        journal, or None when the user has no grants.
        """
        active_journal_id = None
        if self.active_journal_resolver is not None:
            active_journal_id = self.active_journal_resolver(user.id)

        token = self.new_token()
        now = self.clock()
        data = SessionData(
            token=token,
            user_id=user.id,
            name=user.name,
            role=user.role,
            active_journal_id=active_journal_id,
            created_at=now,
            expires_at=now + self.ttl,
        )
        session = self.repository.set(token, data, self.ttl)
        logger.info(f"Session created for user {user.id}")
        return session

    def resolve_session(self, token: Optional[str]) -> Optional[SessionData]:
        """Return the live session for *token*, or None if it is unknown or expired."""
        if not token:
            return None
        session = self.repository.get(token)
        if session is None:
            return None
        if session.is_expired(self.clock()):
            self.repository.delete(token)
            logger.debug(f"Expired session for user {session.user_id} discarded")
            return None
        return session

    def destroy_session(self, token: Optional[str]) -> None:
        """Idempotent: unknown or expired tokens are ignored."""
        if token:
            self.repository.delete(token)

    def set_active_journal(self, session: SessionData, journal_id: int) -> SessionData:
        updated = session.model_copy(update={"active_journal_id": journal_id})
        return self.repository.set(session.token, updated, self.ttl)

    def destroy_user_sessions(self, user_id: int) -> int:
        return self.repository.delete_for_user(user_id)

    def purge_expired(self) -> int:
        return self.repository.purge_expired(self.clock())
