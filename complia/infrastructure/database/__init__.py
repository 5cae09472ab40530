"""Async PostgreSQL access with SQLAlchemy 2.

- **base**: declarative base and common columns
- **session**: engine and request session lifecycle
- **models**: ORM tables
- **repositories**: implementations of the scheduling storage ports
- **dependencies**: FastAPI session dependency
"""

from complia.infrastructure.database.base import Base, BaseModel
from complia.infrastructure.database.dependencies import DatabaseSession, get_db
from complia.infrastructure.database.repository import BaseRepository
from complia.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
]
