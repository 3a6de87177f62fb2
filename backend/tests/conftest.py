"""Test configuration for the Clerk user sync backend."""

import os
from collections.abc import AsyncGenerator, Callable, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from tests.support import TEST_SIGNING_SECRET, SpyUserStore, WebhookSigner

# Settings are read when clerk_sync.main is imported
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("CLERK_WEBHOOK_SIGNING_SECRET", TEST_SIGNING_SECRET)
os.environ.setdefault("DATABASE_DISABLE_POOLING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import clerk_sync.database as database_module  # noqa: E402
from clerk_sync.api.http.dependencies import get_user_store  # noqa: E402
from clerk_sync.config import get_settings  # noqa: E402
from clerk_sync.database import Base  # noqa: E402
from clerk_sync.infrastructure.metrics import reset_webhook_counts  # noqa: E402
from clerk_sync.main import app  # noqa: E402
from clerk_sync.models import User  # noqa: E402


def _sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def test_database_url(tmp_path: Path) -> str:
    """A throwaway SQLite file per test."""
    return _sqlite_url(tmp_path / "clerk_sync_test.db")


@pytest.fixture(autouse=True)
def reset_environment_state(test_database_url: str) -> Generator[None, None, None]:
    """Reset environment variables between tests to prevent interference."""

    original_env: dict[str, str | None] = {}
    test_specific_vars = [
        "ENVIRONMENT",
        "DATABASE_URL",
        "DATABASE_DISABLE_POOLING",
        "CLERK_WEBHOOK_SIGNING_SECRET",
        "CLERK_WEBHOOK_TOLERANCE_SECONDS",
        "CLERK_WEBHOOK_ABSORB_CONFLICTS",
        "PROMETHEUS_METRICS_ENABLED",
        "LOG_LEVEL",
        "LOG_DEBUG_NAMESPACES",
    ]

    for var in test_specific_vars:
        original_env[var] = os.environ.get(var)

    baseline = {
        "ENVIRONMENT": "development",
        "DATABASE_URL": test_database_url,
        "DATABASE_DISABLE_POOLING": "true",
        "CLERK_WEBHOOK_SIGNING_SECRET": TEST_SIGNING_SECRET,
    }

    for var in test_specific_vars:
        if var not in baseline:
            os.environ.pop(var, None)

    for key, value in baseline.items():
        os.environ[key] = value

    get_settings.cache_clear()

    yield

    for var, value in original_env.items():
        if value is None:
            os.environ.pop(var, None)
        else:
            os.environ[var] = value
    get_settings.cache_clear()


@pytest_asyncio.fixture(autouse=True)
async def reset_database_globals():
    """Dispose DB globals before/after each test so each test gets its own engine."""

    async def _dispose() -> None:
        await database_module.dispose_async_engine()
        database_module.reset_async_session_factory()

    await _dispose()
    yield
    await _dispose()


@pytest.fixture(autouse=True)
def reset_app_state() -> Generator[None, None, None]:
    """Clear overrides, startup state and counters left on the module-level app."""
    reset_webhook_counts()
    app.state.webhook_verifier = None
    app.state.webhook_absorb_conflicts = True
    yield
    app.dependency_overrides.clear()
    app.state.webhook_verifier = None
    app.state.webhook_absorb_conflicts = True
    reset_webhook_counts()


@pytest_asyncio.fixture
async def test_engine(test_database_url: str):
    """Create the test database schema from the ORM metadata."""
    engine = create_async_engine(test_database_url, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def load_user(test_engine) -> Callable:
    """Read a user row through a fresh session, bypassing any identity map."""
    factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)

    async def _load(user_id: str) -> User | None:
        async with factory() as session:
            return await session.get(User, user_id)

    return _load


@pytest_asyncio.fixture
async def async_client(test_engine) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the application lifespan running."""
    _ = test_engine
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac


@pytest.fixture
def client(test_engine) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    _ = test_engine
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signer() -> WebhookSigner:
    return WebhookSigner(TEST_SIGNING_SECRET)


@pytest.fixture
def spy_store() -> SpyUserStore:
    """Replace the SQLAlchemy store with an in-memory spy for the app."""
    store = SpyUserStore()

    async def _get_user_store_override() -> SpyUserStore:
        return store

    app.dependency_overrides[get_user_store] = _get_user_store_override
    return store
