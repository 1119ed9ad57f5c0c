"""Database session management."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from draftbox.core.config import settings


def get_database_url() -> str:
    """Get the database URL, ensuring the directory exists."""
    if settings.database_url:
        return settings.database_url

    db_path = settings.db_path
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Fall back to local directory for development
        db_path = Path("./data") / db_path.name
        db_path.parent.mkdir(parents=True, exist_ok=True)

    return f"sqlite+aiosqlite:///{db_path}"


def enable_sqlite_pragmas(engine: AsyncEngine, wal: bool = True) -> None:
    """Turn on foreign key enforcement (and WAL) for every new connection.

    SQLite ships with foreign keys disabled; the ON DELETE rules on the
    folder/design/tag tables only fire once this pragma is set.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if wal:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=30000")  # 30 second busy timeout
        cursor.close()


# Create async engine with connection args for SQLite concurrency
engine = create_async_engine(
    get_database_url(),
    echo=settings.debug,
    future=True,
    connect_args={
        "timeout": 30,  # Wait up to 30 seconds for locks
    },
    pool_pre_ping=True,
)
enable_sqlite_pragmas(engine)


def get_engine() -> AsyncEngine:
    """Get the database engine."""
    return engine


# Create async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    from draftbox.db.base import Base
    import draftbox.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Yields:
        An async database session.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
