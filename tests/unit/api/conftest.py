"""Fixtures for API unit tests: an app with stubbed services and an HTTP client."""

from collections.abc import AsyncGenerator
from typing import cast

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture, MockType

from complia.api.dependencies import (
    get_assignment_service,
    get_compliance_repository,
    get_holiday_calendar,
    get_task_generator,
)
from complia.api.main import create_app
from complia.core.config import Settings
from complia.domain.scheduling.holidays import HolidayCalendar


@pytest.fixture
def app(mock_settings: Settings, mocker: MockerFixture) -> FastAPI:
    """Application without logging, tracing or database side effects."""
    mocker.patch("complia.api.main.setup_logging")
    mocker.patch("complia.api.main.setup_tracing")
    mocker.patch("complia.api.main.instrument_app")
    return create_app(mock_settings)


@pytest.fixture
def generator(mocker: MockerFixture) -> MockType:
    return cast("MockType", mocker.AsyncMock())


@pytest.fixture
def assignments(mocker: MockerFixture) -> MockType:
    return cast("MockType", mocker.AsyncMock())


@pytest.fixture
def catalog(mocker: MockerFixture) -> MockType:
    return cast("MockType", mocker.AsyncMock())


@pytest.fixture
def wired_app(
    app: FastAPI,
    generator: MockType,
    assignments: MockType,
    catalog: MockType,
    calendar: HolidayCalendar,
) -> FastAPI:
    """App whose scheduling services are replaced by mocks."""
    app.dependency_overrides[get_task_generator] = lambda: generator
    app.dependency_overrides[get_assignment_service] = lambda: assignments
    app.dependency_overrides[get_compliance_repository] = lambda: catalog
    app.dependency_overrides[get_holiday_calendar] = lambda: calendar
    return app


@pytest.fixture
async def client(wired_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=wired_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
