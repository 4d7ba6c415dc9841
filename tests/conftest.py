"""
Pytest configuration and fixtures for the Baby Journal API tests.
"""

import os

# Settings are read at import time, so the test environment goes in first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret"

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from main import app
from app.core.config import Base, SessionLocal, engine, settings
from app.core.rate_limit import login_rate_limiter


DEFAULT_PASSWORD = "password1"


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_database() -> Generator[None, None, None]:
    """Fresh schema for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def media_root(tmp_path, monkeypatch):
    """Uploads go to a per-test directory."""
    root = tmp_path / "media"
    monkeypatch.setattr(settings, "MEDIA_ROOT", str(root))
    return root


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> Generator[None, None, None]:
    login_rate_limiter.reset()
    yield
    login_rate_limiter.reset()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
def make_client() -> Callable[[], TestClient]:
    """Factory for API clients; each one keeps its own cookie jar."""

    def _make_client() -> TestClient:
        return TestClient(app, headers={"Accept": "application/json"})

    return _make_client


@pytest.fixture
def register(make_client):
    """
    Register a user with a fresh client and return the logged-in client.

    The first user registered in a test becomes the site admin.
    """

    def _register(name: str, email: str, password: str = DEFAULT_PASSWORD, **extra) -> TestClient:
        client = make_client()
        response = client.post(
            "/api/registro",
            json={"name": name, "email": email, "password": password, **extra},
        )
        assert response.status_code == 201, response.text
        return client

    return _register


@pytest.fixture
def admin_client(register) -> TestClient:
    return register("Admin", "admin@x.com")


@pytest.fixture
def active_journal_id():
    """Id of the journal currently active for a client's session."""

    def _active_journal_id(client: TestClient) -> int:
        return client.get("/api/me").json()["active_journal_id"]

    return _active_journal_id
