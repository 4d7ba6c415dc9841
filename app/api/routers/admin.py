# app/api/routers/admin.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import get_db
from app.core.security import get_current_admin, get_session_manager
from app.schemas.admin import AdminStats, SiteSettingsOut, SiteSettingsUpdate
from app.schemas.session import SessionData
from app.schemas.user_auth import SuccessResponse, UserOut, UserRoleUpdate
from app.services.admin import admin_service
from app.services.media import MediaStorage, get_media_storage
from app.services.session import SessionManager
from app.services.user_auth import user_auth_service

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# =====================================================================
# SITE SETTINGS
# =====================================================================


@router.get("/site-settings", response_model=SiteSettingsOut, summary="Get site settings")
def get_site_settings(
    admin: SessionData = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return admin_service.get_site_settings(db)


@router.put("/site-settings", response_model=SiteSettingsOut, summary="Update site settings")
def update_site_settings(
    settings_data: SiteSettingsUpdate,
    admin: SessionData = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """
    - **site_name**: 1-255 characters
    - **allow_new_registrations**: Whether the public registration endpoint is open
    """
    return admin_service.update_site_settings(db, settings_data)


@router.get("/stats", response_model=AdminStats, summary="Site statistics")
def get_stats(
    admin: SessionData = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return admin_service.get_stats(db)


# =====================================================================
# USER MANAGEMENT
# =====================================================================


@router.get("/usuarios", response_model=List[UserOut], summary="List all users")
def list_users(
    admin: SessionData = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return user_auth_service.get_users(db)


@router.put("/usuarios/{user_id}/rol", response_model=UserOut, summary="Change user role")
def update_user_role(
    user_id: int,
    role_data: UserRoleUpdate,
    admin: SessionData = Depends(get_current_admin),
    db: Session = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Change a user's site role (admin or user).

    The user is logged out everywhere. Admins cannot demote themselves.
    """
    return user_auth_service.update_role(db, user_id, role_data.role, admin, manager)


@router.delete("/usuarios/{user_id}", response_model=SuccessResponse, summary="Delete user")
def delete_user(
    user_id: int,
    admin: SessionData = Depends(get_current_admin),
    db: Session = Depends(get_db),
    media: MediaStorage = Depends(get_media_storage),
):
    """
    Delete a user account.

    Events they wrote are kept without an author. Journals they were the only
    owner of pass to the oldest remaining editor or viewer, or are deleted if
    nobody else has access.
    """
    user_auth_service.delete_user(db, user_id, admin, media)
    return SuccessResponse(message="User deleted")
