# services/admin.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ServiceError
from app.crud.event import crud_event
from app.crud.journal import crud_journal
from app.crud.site_config import crud_site_config
from app.crud.user_auth import crud_user
from app.models.site_config import SiteConfig
from app.schemas.admin import AdminStats, SiteSettingsUpdate

logger = logging.getLogger(__name__)


class AdminService:
    """Site-wide settings and counters."""

    def get_site_settings(self, db: Session) -> SiteConfig:
        return crud_site_config.get_or_create(db)

    def update_site_settings(self, db: Session, settings_data: SiteSettingsUpdate) -> SiteConfig:
        try:
            config = crud_site_config.update(db, obj_in=settings_data)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Error updating site settings: {exc}")
            raise ServiceError("Failed to update site settings") from exc

        logger.info(
            f"Site settings updated: name={config.site_name!r}, "
            f"registrations={'open' if config.allow_new_registrations else 'closed'}"
        )
        return config

    def get_stats(self, db: Session) -> AdminStats:
        return AdminStats(
            total_users=crud_user.count(db),
            total_journals=crud_journal.count(db),
            total_events=crud_event.count(db),
        )


admin_service = AdminService()
