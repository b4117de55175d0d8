"""Pytest configuration and shared fixtures.

API tests run against the real app with its service registry swapped for
in-memory fakes. Tests marked with the ``db_session`` fixture need PostgreSQL
and are skipped when it is not reachable.
"""

from __future__ import annotations

import os

# Settings are validated at import; provide a complete test environment first.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POSTGRES_USER", "postgres")
os.environ.setdefault("POSTGRES_PASSWORD", "postgres")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_DB", "chatbot24_blog")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")
os.environ.setdefault("RATE_LIMIT_STORAGE_URL", "memory://")

import types  # noqa: E402
from collections.abc import AsyncIterator  # noqa: E402
from typing import Any, cast  # noqa: E402
from urllib.parse import urlparse  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from pydantic import PostgresDsn  # noqa: E402
from sqlalchemy import text  # noqa: E402
from sqlalchemy.exc import DBAPIError  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.api.dependencies.current_user import get_current_user  # noqa: E402
from app.core import config  # noqa: E402
from app.core.background import drain_background  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.models.user import User, UserRole  # noqa: E402
from app.db.session import dispose_engine  # noqa: E402
from app.llm.client import FallbackCompletionClient  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.blog_service import BlogService  # noqa: E402
from app.services.chat_service import ChatService  # noqa: E402
from app.services.moderation_service import ModerationService  # noqa: E402
from app.services.sync_service import SyncService  # noqa: E402
from tests.fakes import (  # noqa: E402
    TEST_CHANNEL,
    FakeChannelFetcher,
    FakeImageFinder,
    FakeRewriter,
    InMemoryPostStore,
    MockCompletionProvider,
)


def _get_test_database_url() -> str:
    """Resolve the test database URL from env or derive it from the main one."""
    env_url = os.getenv("TEST_DATABASE_URL")
    if env_url:
        return env_url
    parsed_base = urlparse(str(config.settings.database_url))
    base_db_name = parsed_base.path.lstrip("/") or "postgres"
    return parsed_base._replace(path=f"/{base_db_name}_test").geturl()


test_database_url = _get_test_database_url()
postgres_url = urlparse(test_database_url)._replace(path="/postgres").geturl()


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config.settings, "environment", "test")
    monkeypatch.setattr(config.settings, "cron_secret", "test-cron-secret")


# In-memory collaborators


@pytest.fixture
def post_store() -> InMemoryPostStore:
    return InMemoryPostStore()


@pytest.fixture
def fetcher() -> FakeChannelFetcher:
    return FakeChannelFetcher()


@pytest.fixture
def rewriter() -> FakeRewriter:
    return FakeRewriter()


@pytest.fixture
def image_finder() -> FakeImageFinder:
    return FakeImageFinder(url="https://images.unsplash.com/photo-1")


@pytest.fixture
def completion_provider() -> MockCompletionProvider:
    return MockCompletionProvider(reply="Здравствуйте! Чем займётся бот?")


@pytest.fixture
def sync_service(
    post_store: InMemoryPostStore,
    fetcher: FakeChannelFetcher,
    rewriter: FakeRewriter,
    image_finder: FakeImageFinder,
) -> SyncService:
    return SyncService(
        fetcher=fetcher,
        rewriter=rewriter,
        image_finder=image_finder,
        store=post_store,
        channel=TEST_CHANNEL,
        fetch_limit=20,
        min_message_length=50,
        slug_max_attempts=50,
    )


# App wired to fakes


@pytest.fixture
def app(
    post_store: InMemoryPostStore,
    sync_service: SyncService,
    completion_provider: MockCompletionProvider,
) -> FastAPI:
    """App whose service registry is backed by in-memory fakes (no database access)."""
    fastapi_app = create_app()
    services: dict[str, Any] = dict(fastapi_app.state.services)
    services.update(
        sync_service=sync_service,
        moderation_service=ModerationService(post_store),
        blog_service=BlogService(post_store),
        chat_service=ChatService(
            FallbackCompletionClient(completion_provider, ["model-a", "model-b"])
        ),
    )
    fastapi_app.state.services = types.MappingProxyType(services)
    return fastapi_app


@pytest_asyncio.fixture
async def http_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    await drain_background()


def _user(role: UserRole) -> User:
    return User(id=1, email=f"{role.value.lower()}@chatbot24.su", hashed_password="x", role=role)


@pytest.fixture
def as_admin(app: FastAPI) -> User:
    """Authenticate every request as an ADMIN user."""
    admin = _user(UserRole.ADMIN)
    app.dependency_overrides[get_current_user] = lambda: admin
    return admin


@pytest.fixture
def as_regular_user(app: FastAPI) -> User:
    """Authenticate every request as a non-admin user."""
    user = _user(UserRole.USER)
    app.dependency_overrides[get_current_user] = lambda: user
    return user


# PostgreSQL fixtures (session-scoped, shared event loop)


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def ensure_test_database() -> None:
    """Create the test database if needed; skip DB tests when PostgreSQL is unreachable."""
    test_db_name = urlparse(test_database_url).path.lstrip("/")
    admin_engine = create_async_engine(
        postgres_url, pool_pre_ping=True, isolation_level="AUTOCOMMIT"
    )
    try:
        async with admin_engine.connect() as conn:
            result = await conn.execute(
                text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
                {"db_name": test_db_name},
            )
            if result.scalar() is None:
                await conn.execute(text(f'CREATE DATABASE "{test_db_name}"'))
    except (OSError, DBAPIError) as exc:
        pytest.skip(f"PostgreSQL is not reachable: {exc}")
    finally:
        await admin_engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine(ensure_test_database: None) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(test_database_url, pool_pre_ping=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(loop_scope="session")
async def db_session(
    test_session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session for one test; every table is emptied afterwards."""
    async with test_session_maker() as session:
        try:
            yield session
        finally:
            for table in reversed(Base.metadata.sorted_tables):
                await session.execute(table.delete())
            await session.commit()


@pytest_asyncio.fixture(loop_scope="session")
async def db_app(
    db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> AsyncIterator[FastAPI]:
    """Real app against the test database (auth endpoints use the unit of work)."""
    monkeypatch.setattr(config.settings, "database_url", cast(PostgresDsn, test_database_url))
    monkeypatch.setattr(config.settings, "admin_emails", ["boss@chatbot24.su"])
    yield create_app()
    await dispose_engine()


@pytest_asyncio.fixture(loop_scope="session")
async def db_http_client(db_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=db_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
