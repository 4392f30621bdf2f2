"""
Murmur Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy:
    Unit-level (no real database):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── fake_database:   Database look-alike yielding mock_db_session
    └── hasher:          Low-cost PasswordHasher

    API-level (real app, temporary SQLite file):
    ├── test_settings:   Settings pointing at tmp_path, DB_AUTO_CREATE on
    ├── app:             create_app(test_settings) with the lifespan running
    ├── test_client:     HTTPX AsyncClient over ASGITransport
    └── register_user / login_headers: helpers returning ids and auth headers
"""

import os
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Must be set before murmur.config builds its singleton
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./murmur_test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from murmur.config import Settings  # noqa: E402
from murmur.main import create_app, lifespan  # noqa: E402
from murmur.services.passwords import PasswordHasher  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-level fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


class FakeDatabase:
    """Database stand-in: same session()/bounded() surface, no engine."""

    def __init__(self, session):
        self._session = session
        self.sessions_opened = 0

    @asynccontextmanager
    async def session(self):
        self.sessions_opened += 1
        try:
            yield self._session
            await self._session.commit()
        except BaseException:
            await self._session.rollback()
            raise

    async def bounded(self, awaitable):
        return await awaitable


@pytest.fixture
def fake_database(mock_db_session):
    return FakeDatabase(mock_db_session)


@pytest.fixture(scope="session")
def hasher():
    """bcrypt at the minimum cost factor; hashing at 10 rounds slows the suite."""
    return PasswordHasher(rounds=4)


# ══════════════════════════════════════════════════════════════════════════
# API-level fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'murmur.db'}",
        secret_key="test-secret-key-not-for-production",
        bcrypt_rounds=4,
        db_auto_create=True,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(test_settings):
    """The application with its lifespan entered (tables created, services on app.state)."""
    application = create_app(test_settings)
    async with lifespan(application):
        yield application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_root(test_client):
            response = await test_client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_user(test_client):
    """Register a user and return its id."""

    async def _register(username: str, password: str) -> int:
        response = await test_client.post(
            "/api/register", json={"username": username, "password": password}
        )
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _register


@pytest.fixture
def login_headers(test_client):
    """Log in and return an Authorization header dict."""

    async def _login(username: str, password: str) -> dict:
        response = await test_client.post(
            "/api/login", json={"username": username, "password": password}
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login
