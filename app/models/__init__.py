# app/models/__init__.py

from app.core.config import Base

# Import all models here so metadata.create_all and app-wide imports see every table
from .user import User, UserRole
from .journal import Journal, JournalAccess, JournalRole
from .event import Event, EventKind
from .site_config import SiteConfig, SITE_CONFIG_ID
from .user_session import UserSession

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Journal",
    "JournalAccess",
    "JournalRole",
    "Event",
    "EventKind",
    "SiteConfig",
    "SITE_CONFIG_ID",
    "UserSession",
]
