# app/api/routers/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.core.config import get_db
from app.core.rate_limit import limit_login_attempts
from app.core.security import (
    clear_session_cookie,
    get_current_session,
    get_session_manager,
    get_session_token,
    set_session_cookie,
)
from app.schemas.admin import SiteSettingsOut
from app.schemas.session import SessionData
from app.schemas.user_auth import AuthResponse, LoginRequest, SessionOut, SuccessResponse
from app.services.admin import admin_service
from app.services.session import SessionManager
from app.services.user_auth import user_auth_service

router = APIRouter(prefix="/api", tags=["Authentication"])


async def read_raw_body(request: Request) -> bytes:
    """Undecoded request body; registration decodes it only after the site settings allow it."""
    return await request.body()


# =====================================================================
# PUBLIC ENDPOINTS - No authentication required
# =====================================================================

@router.post(
    "/registro",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user account",
)
def register(
    response: Response,
    body: bytes = Depends(read_raw_body),
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Register a new user account and log them in.

    - **name**: 2-50 characters
    - **email**: Valid email address, unique
    - **password**: At least 8 characters
    - **subject_name**: Optional name for the default journal

    A default journal owned by the new user is created alongside the account.
    Fails with 403 while registrations are switched off in the site settings.
    """
    user, _ = user_auth_service.register_user(db, body)
    session = manager.create_session(user)
    set_session_cookie(response, session)
    return AuthResponse(message="User registered", user=SessionOut.model_validate(session))


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login and start a session",
    dependencies=[Depends(limit_login_attempts)],
)
def login(
    login_data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Authenticate with email and password.

    On success the session cookie is set; the active journal is the one the
    user opened most recently. Rate limited per client address.
    """
    user = user_auth_service.authenticate_user(db, login_data)
    session = manager.create_session(user)
    set_session_cookie(response, session)
    return AuthResponse(message="Login successful", user=SessionOut.model_validate(session))


@router.api_route(
    "/logout",
    methods=["GET", "POST"],
    response_model=SuccessResponse,
    summary="Logout",
)
def logout(
    response: Response,
    token: Optional[str] = Depends(get_session_token),
    manager: SessionManager = Depends(get_session_manager),
):
    """End the current session. Succeeds even without one."""
    manager.destroy_session(token)
    clear_session_cookie(response)
    return SuccessResponse(message="Logged out")


@router.get("/site-info", response_model=SiteSettingsOut, summary="Public site info")
def site_info(db: Session = Depends(get_db)):
    """Site name and whether registration is open."""
    return admin_service.get_site_settings(db)


# =====================================================================
# USER ENDPOINTS - Authentication required
# =====================================================================

@router.get("/me", response_model=SessionOut, summary="Get current session")
def me(session: SessionData = Depends(get_current_session)):
    return session
