"""Database package for Draftbox: engine, sessions and the library schema."""

from draftbox.db.base import Base
from draftbox.db.session import (
    async_session_maker,
    enable_sqlite_pragmas,
    engine,
    get_db,
    init_db,
)

__all__ = [
    "Base",
    "async_session_maker",
    "enable_sqlite_pragmas",
    "engine",
    "get_db",
    "init_db",
]
