"""
IP Reverser: Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    ├── test_settings:   Settings built without reading .env
    ├── memory_store:    Fresh InMemoryRecordStore
    ├── test_app:        FastAPI app wired to memory_store
    ├── test_client:     HTTPX AsyncClient talking to test_app over ASGI
    ├── sqlite_store:    SqlRecordStore on a temporary SQLite file (aiosqlite)
    └── broken_sql_store: SqlRecordStore whose database cannot be opened

No test needs a running PostgreSQL.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from ipreverser.config import Settings
from ipreverser.main import create_app
from ipreverser.services.record_store import InMemoryRecordStore, SqlRecordStore


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, log_level="WARNING", cors_origins="*")


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def test_app(test_settings, memory_store):
    return create_app(settings=test_settings, record_store=memory_store)


@pytest_asyncio.fixture
async def test_client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX client routed straight into the app.

    ASGITransport reports the peer as 127.0.0.1 unless a test builds its
    own transport with a different `client`.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def sqlite_store(tmp_path) -> AsyncGenerator[SqlRecordStore, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'records.db'}")
    store = SqlRecordStore(engine)
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def broken_sql_store(tmp_path) -> AsyncGenerator[SqlRecordStore, None]:
    # Parent directory does not exist, so every connect attempt fails
    missing = tmp_path / "missing-dir" / "records.db"
    engine = create_async_engine(f"sqlite+aiosqlite:///{missing}")
    store = SqlRecordStore(engine, init_retry_attempts=1)
    yield store
    await store.close()
