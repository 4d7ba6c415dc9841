# app/schemas/__init__.py

from .user_auth import (
    RegisterRequest,
    LoginRequest,
    UserOut,
    SessionOut,
    AuthResponse,
    UserRoleUpdate,
    SuccessResponse,
)
from .session import SessionData
from .journal import (
    JournalCreate,
    JournalUpdate,
    JournalOut,
    JournalListResponse,
    ActiveJournalRequest,
    ActiveJournalResponse,
    ThemeConfig,
    AccessGrantRequest,
    AccessGrantOut,
    AccessGrantListResponse,
)
from .event import EventCreate, EventUpdate, EventOut, EventListResponse
from .admin import SiteSettingsOut, SiteSettingsUpdate, AdminStats


__all__ = [
    # Auth
    "RegisterRequest", "LoginRequest", "UserOut", "SessionOut", "AuthResponse",
    "UserRoleUpdate", "SuccessResponse", "SessionData",

    # Journals
    "JournalCreate", "JournalUpdate", "JournalOut", "JournalListResponse",
    "ActiveJournalRequest", "ActiveJournalResponse", "ThemeConfig",
    "AccessGrantRequest", "AccessGrantOut", "AccessGrantListResponse",

    # Events
    "EventCreate", "EventUpdate", "EventOut", "EventListResponse",

    # Admin
    "SiteSettingsOut", "SiteSettingsUpdate", "AdminStats",
]
