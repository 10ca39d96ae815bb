"""
pytest configuration: an in-memory catalog store per test, a fixed clock and an HTTP client.
"""
from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, enable_sqlite_foreign_keys, get_db
from app.schemas.book_schemas import BookCreate
from app.services.catalog_services import book_service
from app.utils.time_helpers import utc_now
from main import app
from tests.fixtures.sample_data import NOW, admin_token, book_payload


@pytest.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(test_engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_book(db):
    """Create a book through the service and return its BookOut."""
    async def _make(now: datetime = NOW, **overrides):
        result = await book_service.create_book(db, BookCreate(**book_payload(**overrides)), now)
        return result["data"]
    return _make


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[utc_now] = lambda: NOW
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {admin_token()}"}


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: pure-function tests")
    config.addinivalue_line("markers", "integration: tests against the in-memory store")
