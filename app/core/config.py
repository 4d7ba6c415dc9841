from contextlib import contextmanager
from typing import Generator, Iterator, List
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool
from pydantic_settings import BaseSettings, SettingsConfigDict


# =====================================================================
# SETTINGS
# =====================================================================


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Baby Journal API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./baby_journal.db"

    # Sessions
    SECRET_KEY: str = "change-me-session-secret"
    ALGORITHM: str = "HS256"
    SESSION_TTL_HOURS: int = 24
    SESSION_COOKIE_NAME: str = "baby_journal_session"

    # Passwords
    BCRYPT_ROUNDS: int = 12

    # Media uploads
    MEDIA_ROOT: str = "./media"
    MAX_UPLOAD_BYTES: int = 25 * 1024 * 1024

    # Login rate limiting (fixed window per client address)
    LOGIN_RATE_LIMIT: int = 100
    LOGIN_RATE_WINDOW_SECONDS: int = 15 * 60
    TRUST_PROXY_HEADERS: bool = False

    # Site defaults
    DEFAULT_SITE_NAME: str = "Baby Journal"

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()


# =====================================================================
# DATABASE
# =====================================================================

_engine_kwargs = {}
if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
    # one shared connection, otherwise every checkout sees an empty database
    _engine_kwargs["poolclass"] = StaticPool

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if settings.is_sqlite else {},
    **_engine_kwargs,
)


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE clauses unless foreign keys are switched on."""
    if settings.is_sqlite:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit everything done inside the block as one unit, or roll all of it back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
