"""Pytest configuration and fixtures."""

import os
import shutil
import tempfile
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Point the application at a throwaway directory BEFORE importing app modules
_test_tmp_dir = tempfile.mkdtemp(prefix="draftbox_test_")
os.environ["DRAFTBOX_CONFIG_PATH"] = str(Path(_test_tmp_dir) / "config")

from draftbox.db import get_db
from draftbox.db.base import Base
from draftbox.db.session import enable_sqlite_pragmas
from draftbox.main import app


@pytest.fixture
async def db_engine():
    """Create an in-memory test database engine with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )
    enable_sqlite_pragmas(engine, wal=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    """Create a test client with overridden database dependency."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp directories after test session."""
    if Path(_test_tmp_dir).exists():
        shutil.rmtree(_test_tmp_dir, ignore_errors=True)
