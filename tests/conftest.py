"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- A fresh SQLite database file per test
- Database session for arranging and checking data
- Redis client (in-memory fake)
- HTTP client with dependency overrides
- Base data fixtures (users, auth headers, team, project)
"""

import os
import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import NullPool
from fakeredis import FakeAsyncRedis

# Set test environment variables BEFORE importing the app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_LEVEL"] = "WARNING"

from taskboard.main import app
from taskboard.api.dependencies import get_db, get_redis
from tests.factories.user import auth_headers_for
from taskboard.db.base import Base
from taskboard.db.session import build_engine, build_session_factory


# ==================== Database ====================

@pytest.fixture
async def test_engine(tmp_path):
    """
    Create a test database engine backed by a throwaway SQLite file.

    Every test gets an empty schema; each session opens its own connection.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return build_session_factory(test_engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Session used by tests to arrange and inspect data.

    Commit after arranging data so API requests (which use their own
    sessions) can see it.
    """
    session = session_factory()
    yield session
    await session.close()


# ==================== Redis ====================

@pytest.fixture
async def redis_client() -> AsyncGenerator[FakeAsyncRedis, None]:
    """
    Create fake Redis client (in-memory) for each test.
    """
    redis = FakeAsyncRedis()
    await redis.flushall()
    yield redis
    await redis.aclose()


# ==================== FastAPI Client ====================

@pytest.fixture
async def client(session_factory, redis_client: FakeAsyncRedis) -> AsyncGenerator[AsyncClient, None]:
    """
    Create HTTP client for testing FastAPI endpoints.

    Overrides get_db (one fresh session per request, like production) and
    get_redis to use the test fixtures.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        yield redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Base Data Fixtures ====================

@pytest.fixture
async def user(db_session: AsyncSession):
    """Create a test user."""
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, name="Alice", email="alice@example.com")
    await db_session.commit()
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession):
    """A second user with no team in common with `user`."""
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, name="Bob", email="bob@example.com")
    await db_session.commit()
    return user


@pytest.fixture
def auth_headers(user):
    """Authentication headers for `user`."""
    return auth_headers_for(user)


@pytest.fixture
def other_auth_headers(other_user):
    """Authentication headers for `other_user`."""
    return auth_headers_for(other_user)


@pytest.fixture
async def team(db_session: AsyncSession, user):
    """Create a team owned by `user` (owner membership included)."""
    from tests.factories.team import TeamFactory
    team = await TeamFactory.create_async(db_session, created_by=user.id)
    await db_session.commit()
    return team


@pytest.fixture
async def project(db_session: AsyncSession, team, user):
    """Create a project in `team`."""
    from tests.factories.project import ProjectFactory
    project = await ProjectFactory.create_async(db_session, team_id=team.id, created_by=user.id)
    await db_session.commit()
    return project
