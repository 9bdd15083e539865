"""Database package."""
from dailyfocus.db.database import (
    Base,
    async_session_maker,
    close_engine,
    create_primary_engine,
    engine,
    init_db,
)

__all__ = [
    "Base",
    "async_session_maker",
    "close_engine",
    "create_primary_engine",
    "engine",
    "init_db",
]
