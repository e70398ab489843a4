# -*- coding: utf-8 -*-
"""
Pytest Configuration for Account Registry Tests

Common fixtures: an in-memory database, a store driven by a controllable
clock, the services built on it and a FastAPI TestClient.
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from fastapi.testclient import TestClient

from account_registry.config import Settings
from account_registry.database import create_db_engine, init_db, make_session_factory
from account_registry.main import create_app
from account_registry.services import AccountService, AccountStore, AuditLogger, QueryService
from account_registry.utils.ip_utils import RequestContext

ADMIN_KEY = "b" * 64
ADMIN_HEADERS = {"X-Admin-API-Key": ADMIN_KEY}


class FakeClock:
    """Store clock that only moves when a test moves it"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 15, 12, 0, 0))


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine, clock):
    return AccountStore(make_session_factory(engine), clock=clock)


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        ENVIRONMENT="development",
        ADMIN_API_KEY=ADMIN_KEY,
        RATE_LIMIT_ENABLED=False,
        ALLOWED_ORIGINS="http://localhost:3000",
    )


@pytest.fixture
def audit(store):
    context = RequestContext(ip_address="203.0.113.7", user_agent="pytest-agent", operator="admin")
    return AuditLogger(store, context)


@pytest.fixture
def account_service(store, audit):
    return AccountService(store, audit)


@pytest.fixture
def query_service(store, settings):
    return QueryService(store, settings)


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)
