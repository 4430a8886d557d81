"""Root conftest: async SQLite database, repository and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the books table and trigger
    - get_db dependency overridden to return a DatabaseSessionManager bound to that engine
    - Nothing here opens a PostgreSQL connection

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for repository and route tests
    - StaticPool: one shared connection, so every statement sees the same in-memory database
    - DatabaseSessionManager built with __new__: skips pool arguments SQLite's StaticPool rejects
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.infrastructure.database import DatabaseSessionManager, get_db
from app.main import app
from app.services.book_repository import BookRepository


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    return manager


@pytest.fixture
def repository(db_manager):
    return BookRepository(db_manager)


@pytest.fixture
async def client(db_manager):
    """FastAPI test client with the executor dependency overridden."""
    app.dependency_overrides[get_db] = lambda: db_manager
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def book_payload():
    return {
        "title": "1984",
        "author": "George Orwell",
        "isbn": "978-0-452-28423-4",
        "publication_year": 1949,
        "price": 9.99,
    }
