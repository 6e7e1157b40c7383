"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of eventscout.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

from datetime import UTC, datetime, timedelta  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from eventscout.config import EventScoutConfig  # noqa: E402
from eventscout.database.engine import configure_sqlite  # noqa: E402
from eventscout.database.models import Base  # noqa: E402

# Lowest cost bcrypt accepts; keeps the suite fast.
TEST_CONFIG = EventScoutConfig(bcrypt_rounds=4)

# A fixed reference point (Times Square) for geo tests.
NYC = (40.758, -73.9855)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all EventScout tables.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` in ``run_db``).  Foreign keys and
    the distance math functions are enabled on the connection.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def test_config() -> EventScoutConfig:
    return TEST_CONFIG


@pytest.fixture
def jwt_secret() -> str:
    from eventscout.api.deps import JWT_SECRET

    return JWT_SECRET


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------
@pytest.fixture
def make_user(db_engine, jwt_secret):
    """Register a user through the auth service; returns ``(token, user)``."""
    from eventscout.services import auth_service

    def _make(username: str = "alice", email: str | None = None, password: str = "pa55word"):
        return auth_service.register(
            db_engine,
            username=username,
            email=email or f"{username}@example.com",
            password=password,
            cfg=TEST_CONFIG,
            secret=jwt_secret,
        )

    return _make


@pytest.fixture
def make_category(db_engine):
    from eventscout.services import category_service

    def _make(name: str = "Music", description: str | None = None, icon: str | None = None):
        return category_service.create_category(
            db_engine, name=name, description=description, icon=icon
        )

    return _make


@pytest.fixture
def make_event(db_engine):
    """Create an event; any column can be overridden by keyword."""
    from eventscout.services import event_service

    def _make(organizer_id: int, category_id: int, **overrides):
        start = overrides.pop("start_date", datetime(2030, 6, 1, 18, 0, tzinfo=UTC))
        data = {
            "title": "Rooftop Jazz",
            "description": "Live quartet on the roof",
            "location": "Midtown, New York",
            "latitude": NYC[0],
            "longitude": NYC[1],
            "start_date": start,
            "end_date": start + timedelta(hours=3),
            "category_id": category_id,
            "capacity": None,
            "price": None,
        }
        data.update(overrides)
        return event_service.create_event(db_engine, organizer_id, data)

    return _make


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------
@pytest.fixture
def client(db_engine, test_config):
    """FastAPI TestClient bound to the in-memory database.

    Not entered as a context manager, so the lifespan hook (which would
    build an engine from DATABASE_URL) does not run.
    """
    from fastapi.testclient import TestClient

    from eventscout.api.deps import get_config, get_engine
    from eventscout.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: test_config
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
