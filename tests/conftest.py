"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are set before anything imports ``storefront`` so the
settings singleton sees the test configuration.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-key-1:1,test-key-2:2")
os.environ.setdefault("APP_THROTTLE_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from storefront.adapters.catalog.sql import SqlCatalog
from storefront.adapters.ledger.sql import SqlLedger
from storefront.adapters.profile.sql import SqlProfileStore
from storefront.core.app_factory import create_app
from storefront.db.session import build_engine, build_session_factory, init_db
from storefront.domain.models import RateLimitConfig

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> Mock:
    """Controllable clock; set ``clock.return_value`` to move time."""
    return Mock(return_value=T0)


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'storefront-test.sqlite3'}"


@pytest.fixture
def session_factory(database_url: str):
    """Seeded database with users 1 and 2."""
    engine = build_engine(database_url)
    factory = build_session_factory(engine)
    init_db(engine, factory, seed=True, user_ids=[1, 2])
    yield factory
    engine.dispose()


@pytest.fixture
def catalog(session_factory) -> SqlCatalog:
    return SqlCatalog(session_factory)


@pytest.fixture
def ledger(session_factory) -> SqlLedger:
    return SqlLedger(session_factory)


@pytest.fixture
def profiles(session_factory) -> SqlProfileStore:
    return SqlProfileStore(session_factory)


@pytest.fixture
def rate_limit() -> RateLimitConfig:
    return RateLimitConfig(limit_per_product=1, window_seconds=60)


@pytest.fixture
def client(database_url: str, clock: Mock, rate_limit: RateLimitConfig):
    """Test client over a fresh seeded database; the lifespan runs on enter."""
    app = create_app(
        database_url=database_url,
        rate_limit=rate_limit,
        clock=clock,
        seed_products=True,
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": "test-key-1"}


@pytest.fixture
def other_user_headers() -> dict[str, str]:
    return {"X-API-Key": "test-key-2"}
