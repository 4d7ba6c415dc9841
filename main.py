import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import Base, SessionLocal, engine, settings
from app.core.exceptions import register_exception_handlers
from app.crud.site_config import crud_site_config
from app.crud.user_session import SqlAlchemySessionRepository
from app.services.session import SessionManager
from app.api.routers import admin, auth, events, journals

# =====================================================================
# LOGGING
# =====================================================================

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("baby_journal")

# =====================================================================
# CREATE APP
# =====================================================================

app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    description="Multi-user baby journal API",
    version="1.0.0",
)

# =====================================================================
# CORS MIDDLEWARE
# =====================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

logger.info(f"CORS allowed origins: {settings.CORS_ORIGINS}")

# =====================================================================
# DATABASE INITIALIZATION
# =====================================================================

Base.metadata.create_all(bind=engine)


def prepare_database() -> None:
    """Seed the site settings row and drop sessions that expired while we were down."""
    db = SessionLocal()
    try:
        crud_site_config.get_or_create(db)
        purged = SessionManager(SqlAlchemySessionRepository(db)).purge_expired()
        if purged:
            logger.info(f"Purged {purged} expired sessions")
    finally:
        db.close()


prepare_database()

# =====================================================================
# ERROR HANDLERS
# =====================================================================

register_exception_handlers(app)

# =====================================================================
# HEALTH CHECK (before routers)
# =====================================================================


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# =====================================================================
# ROUTES
# =====================================================================

app.include_router(auth.router)
app.include_router(journals.router)
app.include_router(events.router)
app.include_router(admin.router)

app.mount("/media", StaticFiles(directory=settings.MEDIA_ROOT, check_dir=False), name="media")

logger.info("All routers included")

# =====================================================================
# ROOT ENDPOINT
# =====================================================================


@app.get("/")
def root():
    """API root endpoint."""
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "auth": "/api/login",
            "journals": "/api/diarios",
            "events": "/api/eventos",
            "admin": "/api/admin",
        },
    }
