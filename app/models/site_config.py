# models/site_config.py

from sqlalchemy import Column, Integer, String, Boolean
from app.core.config import Base

SITE_CONFIG_ID = 1


class SiteConfig(Base):
    """Singleton row (id=1) with global site settings."""
    __tablename__ = "site_config"

    id = Column(Integer, primary_key=True, default=SITE_CONFIG_ID)
    site_name = Column(String(255), nullable=False)
    allow_new_registrations = Column(Boolean, nullable=False, default=True)
