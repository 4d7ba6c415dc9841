# app/api/routers/journals.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.access import ANY_ROLE, OWNER_ONLY
from app.core.config import get_db
from app.core.security import (
    JournalContext,
    get_current_session,
    get_session_manager,
    require_journal_role,
)
from app.schemas.journal import (
    AccessGrantListResponse,
    AccessGrantOut,
    AccessGrantRequest,
    ActiveJournalRequest,
    ActiveJournalResponse,
    JournalCreate,
    JournalListResponse,
    JournalOut,
    JournalUpdate,
    ThemeConfig,
)
from app.schemas.session import SessionData
from app.schemas.user_auth import SuccessResponse
from app.services.journal import journal_service
from app.services.media import MediaStorage, get_media_storage
from app.services.session import SessionManager

router = APIRouter(prefix="/api/diarios", tags=["Journals"])


# =====================================================================
# MY JOURNALS
# =====================================================================


@router.get("", response_model=JournalListResponse, summary="List my journals")
def list_journals(
    session: SessionData = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Journals I have any role on, most recently accessed first."""
    return journal_service.list_journals(db, session)


@router.post(
    "",
    response_model=JournalOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a journal",
)
def create_journal(
    journal_data: JournalCreate,
    session: SessionData = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Create a journal; the caller becomes its owner."""
    return journal_service.create_journal(db, journal_data, session)


@router.put("/activo", response_model=ActiveJournalResponse, summary="Switch active journal")
def set_active_journal(
    request_data: ActiveJournalRequest,
    session: SessionData = Depends(get_current_session),
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Make a journal the active one for this session.

    Any role on the journal is enough.
    """
    updated = journal_service.set_active_journal(db, request_data.id, session, manager)
    return ActiveJournalResponse(active_journal_id=updated.active_journal_id)


# =====================================================================
# SINGLE JOURNAL
# =====================================================================


@router.get("/{journal_id}", response_model=JournalOut, summary="Get journal")
def get_journal(
    ctx: JournalContext = Depends(require_journal_role(ANY_ROLE)),
    db: Session = Depends(get_db),
):
    return journal_service.get_journal(db, ctx.journal_id, ctx.session.user_id)


@router.put("/{journal_id}", response_model=JournalOut, summary="Rename journal")
def rename_journal(
    journal_data: JournalUpdate,
    ctx: JournalContext = Depends(require_journal_role(OWNER_ONLY)),
    db: Session = Depends(get_db),
):
    """Owner only."""
    return journal_service.rename_journal(db, ctx.journal_id, journal_data, ctx.session.user_id)


@router.delete("/{journal_id}", response_model=SuccessResponse, summary="Delete journal")
def delete_journal(
    ctx: JournalContext = Depends(require_journal_role(OWNER_ONLY)),
    db: Session = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
):
    """
    Delete a journal with all its events, grants and media. Owner only.
    """
    journal_service.delete_journal(db, ctx.journal_id, media)
    return SuccessResponse(message="Journal deleted")


# =====================================================================
# THEME CONFIG (per user, per journal)
# =====================================================================


@router.get("/{journal_id}/config", response_model=ThemeConfig, summary="Get my theme config")
def get_theme_config(
    ctx: JournalContext = Depends(require_journal_role(ANY_ROLE)),
    db: Session = Depends(get_db),
):
    config = journal_service.get_theme_config(db, ctx.journal_id, ctx.session.user_id)
    return ThemeConfig(config=config)


@router.put("/{journal_id}/config", response_model=ThemeConfig, summary="Save my theme config")
def save_theme_config(
    theme: ThemeConfig,
    ctx: JournalContext = Depends(require_journal_role(ANY_ROLE)),
    db: Session = Depends(get_db),
):
    config = journal_service.save_theme_config(
        db, ctx.journal_id, ctx.session.user_id, theme.config
    )
    return ThemeConfig(config=config)


# =====================================================================
# ACCESS GRANTS (owner only)
# =====================================================================


@router.get("/{journal_id}/acceso", response_model=AccessGrantListResponse, summary="List grants")
def list_grants(
    ctx: JournalContext = Depends(require_journal_role(OWNER_ONLY)),
    db: Session = Depends(get_db),
):
    return AccessGrantListResponse(grants=journal_service.list_grants(db, ctx.journal_id))


@router.post("/{journal_id}/acceso", response_model=AccessGrantOut, summary="Grant or change access")
def grant_access(
    grant_data: AccessGrantRequest,
    ctx: JournalContext = Depends(require_journal_role(OWNER_ONLY)),
    db: Session = Depends(get_db),
):
    """
    Give a registered user a role on this journal, or change their role.

    - **email**: The user's email
    - **role**: owner, editor or viewer

    Demoting the journal's last owner is refused.
    """
    return journal_service.grant_access(db, ctx.journal_id, grant_data)


@router.delete(
    "/{journal_id}/acceso/{user_id}",
    response_model=SuccessResponse,
    summary="Revoke access",
)
def revoke_access(
    user_id: int,
    ctx: JournalContext = Depends(require_journal_role(OWNER_ONLY)),
    db: Session = Depends(get_db),
):
    """Remove a user's grant. The last owner cannot be removed."""
    journal_service.revoke_access(db, ctx.journal_id, user_id)
    return SuccessResponse(message="Access revoked")
