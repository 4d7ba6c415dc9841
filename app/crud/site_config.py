# crud/site_config.py
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.site_config import SiteConfig, SITE_CONFIG_ID
from app.schemas.admin import SiteSettingsUpdate


class SiteConfigCRUD:
    """Access to the singleton site configuration row."""

    def get_or_create(self, db: Session) -> SiteConfig:
        config = db.query(SiteConfig).filter(SiteConfig.id == SITE_CONFIG_ID).first()
        if config is None:
            config = SiteConfig(
                id=SITE_CONFIG_ID,
                site_name=settings.DEFAULT_SITE_NAME,
                allow_new_registrations=True,
            )
            db.add(config)
            db.commit()
            db.refresh(config)
        return config

    def update(self, db: Session, *, obj_in: SiteSettingsUpdate) -> SiteConfig:
        config = self.get_or_create(db)
        config.site_name = obj_in.site_name
        config.allow_new_registrations = obj_in.allow_new_registrations
        db.commit()
        db.refresh(config)
        return config


crud_site_config = SiteConfigCRUD()
