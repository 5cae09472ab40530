"""PostgreSQL fixtures for integration tests.

Each test gets a fresh database migrated with Alembic. Tests are skipped when
the server configured in ``DATABASE_CONFIG__DATABASE_URL`` is unreachable.
"""

import asyncio
import os
import uuid
from collections.abc import AsyncGenerator
from pathlib import Path

import asyncpg
import pytest
from alembic import command as alembic_command
from alembic.config import Config
from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from complia.core.config import get_settings

PROJECT_ROOT = Path(__file__).parent.parent.parent

_SEED_COMPLIANCES = text(
    """
    INSERT INTO compliances (name, category, periodicity, due_date_rule, entity_types)
    VALUES
        ('Form AOC-4', 'ROC', 'YEARLY', '{"dueMonth": 10, "dueDay": 29}',
         ARRAY['PRIVATE_LIMITED']),
        ('Form MGT-7', 'ROC', 'YEARLY', '{"dueMonth": 11, "dueDay": 28}',
         ARRAY['PRIVATE_LIMITED']),
        ('Income Tax Return', 'INCOME_TAX', 'YEARLY', '{"dueMonth": 10, "dueDay": 31}',
         ARRAY['PRIVATE_LIMITED', 'LLP'])
    """
)
_SEED_ENTITY = text(
    """
    INSERT INTO entities (tenant_id, client_id, legal_name, entity_type)
    VALUES (1, 5, 'Acme Pvt Ltd', 'PRIVATE_LIMITED')
    RETURNING id
    """
)


def _plain_url(url: str) -> str:
    """asyncpg expects ``postgresql://`` rather than the SQLAlchemy dialect."""
    return url.replace("postgresql+asyncpg://", "postgresql://")


def _upgrade_head(database_url: str) -> None:
    original = os.environ.get("DATABASE_CONFIG__DATABASE_URL")
    os.environ["DATABASE_CONFIG__DATABASE_URL"] = database_url
    get_settings.cache_clear()
    try:
        alembic_command.upgrade(Config(str(PROJECT_ROOT / "alembic.ini")), "head")
    finally:
        if original is None:
            os.environ.pop("DATABASE_CONFIG__DATABASE_URL", None)
        else:
            os.environ["DATABASE_CONFIG__DATABASE_URL"] = original
        get_settings.cache_clear()


@pytest.fixture
async def database_url() -> AsyncGenerator[str]:
    """Create a throwaway database, migrate it, and drop it afterwards."""
    base_url = get_settings().database_config.database_url
    admin_url = _plain_url(base_url)
    name = f"complia_test_{uuid.uuid4().hex[:12]}"

    try:
        conn = await asyncpg.connect(admin_url, timeout=3)
    except (OSError, TimeoutError, asyncpg.PostgresError) as exc:
        pytest.skip(f"PostgreSQL unavailable: {exc}")
    try:
        await conn.execute(f"CREATE DATABASE {name}")
    finally:
        await conn.close()

    url = f"{base_url.rsplit('/', 1)[0]}/{name}"
    # Alembic's env.py runs its own event loop
    await asyncio.get_running_loop().run_in_executor(None, _upgrade_head, url)
    logger.debug("Migrated test database {}", name)

    yield url

    conn = await asyncpg.connect(admin_url)
    try:
        await conn.execute(
            "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
            "WHERE datname = $1 AND pid <> pg_backend_pid()",
            name,
        )
        await conn.execute(f"DROP DATABASE IF EXISTS {name}")
    finally:
        await conn.close()


@pytest.fixture
async def db_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(database_url, pool_size=5, max_overflow=0)
    yield engine
    await engine.dispose()


@pytest.fixture
async def seeded_entity(db_engine: AsyncEngine) -> int:
    """Insert three yearly compliances and one private limited entity."""
    async with AsyncSession(db_engine) as session, session.begin():
        await session.execute(_SEED_COMPLIANCES)
        result = await session.execute(_SEED_ENTITY)
        return int(result.scalar_one())
