"""Shared test fixtures for the Noteria backend test suite.

Tests run against a throwaway SQLite database file (or TEST_DATABASE_URL
when set). Tables are created by the app on import and emptied before every
test, so each test starts from a clean store.
"""

import os
import tempfile

# Configure the app before anything imports noteria.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="noteria-test-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{_TEST_DB_DIR}/noteria_test.db",
)
os.environ["AUTH_ENABLED"] = "true"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["LOG_FORMAT"] = "text"
os.environ["ORPHAN_SWEEP_ON_STARTUP"] = "false"
os.environ["RATE_LIMIT_PER_MINUTE"] = "0"

import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from noteria.database import get_db, SessionLocal
from noteria.main import app
from noteria.core.token_factory import create_token
from noteria.core.config import settings
from noteria.middleware.request_context import rate_limiter

# Child tables first.
_CLEAN_TABLES = ["notes", "rooms"]


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty every table before each test.

    Runs before the test (not after) so a failing test leaves its data
    behind for debugging.
    """
    db = SessionLocal()
    try:
        for table in _CLEAN_TABLES:
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    rate_limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def make_headers():
    """Factory for bearer headers of an arbitrary owner."""

    def _make(user_id: str = "user-1") -> dict:
        token = create_token(subject=user_id, secret=settings.jwt_secret_key)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def auth_headers(make_headers) -> dict:
    """Bearer headers for the default test owner ``user-1``."""
    return make_headers("user-1")
