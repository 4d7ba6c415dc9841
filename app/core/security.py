# app/core/security.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Iterable

from jose import JWTError, jwt
from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.access import check_access, Deny, DenyReason
from app.core.config import settings, get_db
from app.core.exceptions import UnauthorizedError, ForbiddenError
from app.crud.journal import crud_journal, crud_journal_access
from app.crud.user_session import SqlAlchemySessionRepository
from app.models.journal import JournalRole
from app.models.user import UserRole
from app.schemas.session import SessionData
from app.services.session import SessionManager


# =====================================================================
# SESSION TOKEN CONFIGURATION
# =====================================================================

bearer_scheme = HTTPBearer(auto_error=False)


# =====================================================================
# TOKEN SIGNING
# =====================================================================

def sign_session_token(token: str, expires_at: datetime) -> str:
    """
    Wrap the opaque session token in a signed value for the cookie.

    Args:
        token: Server-side session token
        expires_at: Naive UTC expiry of the session

    Returns:
        Signed token string
    """
    payload = {"sid": token, "exp": expires_at.replace(tzinfo=timezone.utc)}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def unsign_session_token(value: str) -> Optional[str]:
    """Return the session token inside a signed value, or None if it was tampered with or expired."""
    try:
        payload = jwt.decode(value, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


def set_session_cookie(response: Response, session: SessionData) -> None:
    max_age = int((session.expires_at - session.created_at).total_seconds())
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sign_session_token(session.token, session.expires_at),
        max_age=max_age,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )


# =====================================================================
# SESSION DEPENDENCIES
# =====================================================================

def get_session_manager(db: Session = Depends(get_db)) -> SessionManager:
    """Session manager bound to the request's database session."""
    return SessionManager(
        SqlAlchemySessionRepository(db),
        ttl=timedelta(hours=settings.SESSION_TTL_HOURS),
        active_journal_resolver=lambda user_id: crud_journal.get_most_recent_id(db, user_id=user_id),
    )


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Read the signed token from the session cookie, falling back to a bearer header."""
    raw = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not raw and credentials:
        raw = credentials.credentials
    if not raw:
        return None
    return unsign_session_token(raw)


def get_optional_session(
    token: Optional[str] = Depends(get_session_token),
    manager: SessionManager = Depends(get_session_manager),
) -> Optional[SessionData]:
    return manager.resolve_session(token)


def get_current_session(
    session: Optional[SessionData] = Depends(get_optional_session),
) -> SessionData:
    """
    Authentication check.

    Raises:
        UnauthorizedError: If the request carries no live session
    """
    if session is None:
        raise UnauthorizedError("Not authenticated")
    return session


def get_current_admin(
    session: SessionData = Depends(get_current_session),
) -> SessionData:
    """
    Admin check, independent of any journal.

    Raises:
        ForbiddenError: If the session user is not a site admin
    """
    if session.role != UserRole.admin:
        raise ForbiddenError("Admin privileges required")
    return session


# =====================================================================
# JOURNAL ROLE CHECKING
# =====================================================================

@dataclass(frozen=True)
class JournalContext:
    """Result of a successful journal-scoped check, handed to route handlers."""
    journal_id: int
    role: JournalRole
    session: SessionData


def require_journal_role(required_roles: Iterable[JournalRole]):
    """
    Dependency factory for journal-scoped role checks.

    The journal id is taken from the `journal_id` path parameter. The
    authentication check runs first, then the role check.

    Example:
        @router.delete("/{journal_id}", ...)
        def delete(ctx: JournalContext = Depends(require_journal_role(OWNER_ONLY))): ...
    """
    roles = frozenset(required_roles)

    def journal_role_checker(
        journal_id: int,
        session: SessionData = Depends(get_current_session),
        db: Session = Depends(get_db),
    ) -> JournalContext:
        decision = check_access(
            session,
            journal_id,
            roles,
            lambda jid, uid: crud_journal_access.get_role(db, journal_id=jid, user_id=uid),
        )
        if isinstance(decision, Deny):
            if decision.reason == DenyReason.unauthenticated:
                raise UnauthorizedError("Not authenticated")
            if decision.reason == DenyReason.no_access:
                raise ForbiddenError("Access denied to this journal")
            raise ForbiddenError("Access denied: insufficient role")
        return JournalContext(journal_id=journal_id, role=decision.role, session=session)

    return journal_role_checker
