"""Global pytest fixtures for the newsroom workflow service.

This module provides shared fixtures for testing including:
- Mock database sessions and Redis clients for unit tests
- An ASGI test client with auth/database dependency overrides
- Shared classification taxonomy
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-newsroom-tests")

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from newsroom.models import StaffRole
from tests.factories.content_factory import Taxonomy, UserFactory


# ===========================================
# DATABASE SESSION FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncMock, None]:
    """Create a mock async database session for unit tests."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.connection = AsyncMock()
    session.in_transaction = MagicMock(return_value=False)
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()

    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=None)

    yield session


# ===========================================
# REDIS MOCK FIXTURES
# ===========================================


@pytest.fixture
def mock_redis_client() -> MagicMock:
    """Create a mock Redis client for unit tests."""
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.setex = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Unit tests run without Redis unless a test installs a client."""
    import newsroom.redis as redis_module

    monkeypatch.setattr(redis_module, "_redis", None)


# ===========================================
# DOMAIN FIXTURES
# ===========================================


@pytest.fixture
def taxonomy() -> Taxonomy:
    return Taxonomy.create()


@pytest.fixture
def sub_editor():
    return UserFactory.create(role=StaffRole.sub_editor)


# ===========================================
# HTTP CLIENT FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def app_client(db_session) -> AsyncGenerator[tuple[AsyncClient, dict], None]:
    """ASGI client with the database swapped for the mock session.

    Yields ``(client, overrides)``; tests set ``overrides["user"]`` to the
    User the auth dependency should return.
    """
    from newsroom.auth import get_current_user
    from newsroom.database import get_db
    from newsroom.main import app

    overrides: dict = {"user": UserFactory.create(role=StaffRole.sub_editor)}

    async def _db():
        yield db_session

    async def _user():
        return overrides["user"]

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_current_user] = _user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, overrides

    app.dependency_overrides.clear()
