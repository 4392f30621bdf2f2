"""
Murmur Backend — Database Handle Tests
========================================

What:  Statement timeout behavior of Database.bounded().
"""

import asyncio

import pytest
import pytest_asyncio

from murmur.config import Settings
from murmur.database import Database
from murmur.exceptions import StoreUnavailableError


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(
        Settings(
            secret_key="unit-test-secret-value",
            database_url=f"sqlite+aiosqlite:///{tmp_path / 'bounded.db'}",
            db_timeout_seconds=0.01,
        )
    )
    yield db
    await db.dispose()


class TestBounded:

    @pytest.mark.asyncio
    async def test_stalled_call_raises_store_unavailable(self, database):
        with pytest.raises(StoreUnavailableError) as exc_info:
            await database.bounded(asyncio.sleep(1))
        assert exc_info.value.status_code == 503
        assert exc_info.value.retry_after == 1

    @pytest.mark.asyncio
    async def test_fast_call_returns_its_result(self, database):
        async def answer():
            return 42

        assert await database.bounded(answer()) == 42

    @pytest.mark.asyncio
    async def test_ping(self, database):
        database.timeout = 5.0
        assert await database.ping() is True
