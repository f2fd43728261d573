import os
import uuid
from contextlib import contextmanager
from typing import AsyncGenerator

# Settings are read at import time by the db and rate limit modules, so the
# test environment has to be in place before anything under libs/ is imported.
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Optional overrides for local runs (never the database URL)
env_test_path = os.path.join(os.path.dirname(__file__), "..", ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=False)

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.events import EventBus
from libs.db.base import Base
from libs.db.retry import DatabaseRetryConfig, DatabaseRetryPolicy

# Import all models so metadata includes every table
from services.activation_service import models as _activation_models  # noqa: F401
from services.activation_service.services.context import ActivationContext
from services.activation_service.services.listeners import register_listeners

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
settings = get_settings()


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def make_doer_user(user_id=None, **overrides) -> AuthUser:
    defaults = {
        "user_id": user_id or f"doer-{uuid.uuid4().hex[:8]}",
        "email": "doer@example.com",
        "role": "authenticated",
        "user_metadata": {"full_name": "Test Doer"},
    }
    defaults.update(overrides)
    return AuthUser(**defaults)


def make_admin_user() -> AuthUser:
    return AuthUser(user_id="service-admin", email="admin@example.com", role="service_role")


@contextmanager
def override_auth(app, user: AuthUser):
    """Temporarily swap the authenticated user for one block of requests."""
    from libs.auth.dependencies import get_current_user

    previous = app.dependency_overrides.get(get_current_user)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = previous


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """
    In-memory SQLite engine with the schema created.

    StaticPool keeps a single connection so every session sees the same
    in-memory database. pysqlite's own transaction handling is switched off
    so SAVEPOINTs (begin_nested, create_savepoint sessions) behave.
    """
    engine = create_async_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session that rolls back after the test.
    We use join_transaction_mode="create_savepoint" so code under test can
    commit and roll back freely inside the outer transaction.
    """
    connection = await test_engine.connect()
    transaction = await connection.begin()

    session_factory = async_sessionmaker(
        bind=connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()
        await transaction.rollback()
        await connection.close()


# ---------------------------------------------------------------------------
# Tracker context
# ---------------------------------------------------------------------------


class RecordingSleep:
    """Stands in for asyncio.sleep so retry tests do not wait."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def event_bus() -> EventBus:
    bus = EventBus()
    register_listeners(bus)
    return bus


@pytest.fixture
def retry_policy() -> DatabaseRetryPolicy:
    return DatabaseRetryPolicy(
        DatabaseRetryConfig(max_attempts=3, base_delay_ms=1, max_delay_ms=5, jitter_ms=0),
        sleep=RecordingSleep(),
    )


@pytest_asyncio.fixture
async def doer(db_session):
    from tests.factories import DoerFactory

    doer = DoerFactory.create()
    db_session.add(doer)
    await db_session.commit()
    return doer


@pytest.fixture
def activation_ctx(db_session, event_bus, retry_policy, doer) -> ActivationContext:
    return ActivationContext(
        db=db_session,
        bus=event_bus,
        doer_id=doer.id,
        settings=settings,
        retry=retry_policy,
    )


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def activation_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient against the activation app with the test session and a
    fresh doer user injected.
    """
    from libs.auth.dependencies import get_current_user
    from libs.db.session import get_async_db
    from services.activation_service.app.main import app

    user = make_doer_user()

    async def _get_test_db():
        yield db_session

    app.dependency_overrides[get_async_db] = _get_test_db
    app.dependency_overrides[get_current_user] = lambda: user

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """
    Bearer header for requests. Auth itself is overridden per fixture, so
    the token is only there to look like a real call.
    """
    return {"Authorization": "Bearer mock-token"}
