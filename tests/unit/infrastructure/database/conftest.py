"""Fixtures for database infrastructure unit tests."""

from collections.abc import Callable, Generator
from typing import cast

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from complia.infrastructure.database.session import _DatabaseManager


class FakePgError(Exception):
    """Stand-in for an asyncpg error carrying a SQLSTATE."""

    def __init__(self, sqlstate: str) -> None:
        super().__init__(f"sqlstate {sqlstate}")
        self.sqlstate = sqlstate


@pytest.fixture
def integrity_error() -> Callable[[str], IntegrityError]:
    """Build an IntegrityError whose driver error has the given SQLSTATE."""

    def _build(sqlstate: str) -> IntegrityError:
        return IntegrityError("INSERT INTO tasks", {}, FakePgError(sqlstate))

    return _build


@pytest.fixture
def mock_session(mocker: MockerFixture) -> MockType:
    """Mock AsyncSession whose ``begin_nested`` works as an async context manager.

    Returns:
        MockType: Session with awaitable execute and flush.
    """
    session = mocker.MagicMock()
    session.execute = mocker.AsyncMock()
    session.flush = mocker.AsyncMock()
    session.commit = mocker.AsyncMock()
    session.rollback = mocker.AsyncMock()
    session.begin_nested = mocker.MagicMock()
    return cast("MockType", session)


@pytest.fixture
def scalars_result(mocker: MockerFixture) -> Callable[[list[object]], MockType]:
    """Build an execute() result whose ``scalars().all()`` returns the rows."""

    def _build(rows: list[object]) -> MockType:
        result = mocker.Mock()
        result.scalars.return_value.all.return_value = rows
        result.scalar_one_or_none.return_value = rows[0] if rows else None
        return cast("MockType", result)

    return _build


@pytest.fixture
def mock_async_engine(mocker: MockerFixture) -> MockType:
    """Mock AsyncEngine whose connection answers ``SELECT 1``."""
    engine = mocker.Mock(spec=AsyncEngine)
    engine.dispose = mocker.AsyncMock()

    connection = mocker.AsyncMock()
    connection.__aenter__ = mocker.AsyncMock(return_value=connection)
    connection.__aexit__ = mocker.AsyncMock(return_value=None)
    result = mocker.Mock()
    result.scalar = mocker.Mock(return_value=1)
    connection.execute = mocker.AsyncMock(return_value=result)
    engine.connect = mocker.Mock(return_value=connection)

    return cast("MockType", engine)


@pytest.fixture
def database_manager() -> Generator[_DatabaseManager]:
    manager = _DatabaseManager()
    yield manager
    manager.reset()
