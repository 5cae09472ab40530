"""Unit tests for middleware, error rendering and the health endpoint."""

import orjson
import pytest
from httpx import AsyncClient
from pytest_mock import MockerFixture, MockType

from complia.api.middleware.error_handler import engine_error_handler, status_code_for
from complia.api.schemas.scheduling import GenerateTasksResponse
from complia.api.utils.responses import ORJSONResponse
from complia.core.exceptions import (
    ComplianceEngineError,
    InternalComputationError,
    NotFoundError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)


@pytest.mark.unit
class TestStatusMapping:
    """Test suite for status_code_for."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (NotFoundError("n"), 404),
            (ValidationError("v"), 400),
            (UnauthorizedError("u"), 401),
            (StoreError("s"), 503),
            (InternalComputationError("c"), 500),
            (ComplianceEngineError("CUSTOM", "x"), 500),
        ],
    )
    def test_mapping(self, error: ComplianceEngineError, expected: int) -> None:
        """Test that each error type maps to its HTTP status."""
        assert status_code_for(error) == expected

    async def test_handler_rejects_foreign_exceptions(
        self, mocker: MockerFixture
    ) -> None:
        """Test that the engine handler refuses other exception types."""
        with pytest.raises(TypeError, match="Expected ComplianceEngineError"):
            await engine_error_handler(mocker.Mock(), ValueError("x"))


@pytest.mark.unit
class TestErrorBody:
    """Test suite for the rendered error body."""

    async def test_debug_info_in_development(
        self, client: AsyncClient, catalog: MockType
    ) -> None:
        """Test that development responses include debug info and identifiers."""
        catalog.get.return_value = None

        response = await client.get(
            "/api/v1/compliances/5/due-dates",
            headers={"X-Tenant-ID": "1", "X-Correlation-ID": "corr-abc"},
        )

        body = response.json()
        assert body["correlation_id"] == "corr-abc"
        assert body["request_id"].startswith("req-")
        assert body["severity"] == "LOW"
        assert body["service_info"]["name"] == "TestApp"
        assert body["debug_info"]["exception_type"] == "NotFoundError"

    async def test_error_log_carries_tenant(
        self, client: AsyncClient, catalog: MockType, mocker: MockerFixture
    ) -> None:
        """Test that engine errors are logged with the caller's tenant."""
        catalog.get.return_value = None
        mock_logger = mocker.patch("complia.api.middleware.error_handler.logger")

        await client.get(
            "/api/v1/compliances/5/due-dates", headers={"X-Tenant-ID": "9"}
        )

        assert mock_logger.warning.call_args.kwargs["tenant_id"] == 9

    async def test_unknown_route(self, client: AsyncClient) -> None:
        """Test that an unknown route renders the standard error body."""
        response = await client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


@pytest.mark.unit
class TestRequestContextMiddleware:
    """Test suite for correlation ID propagation."""

    async def test_echoes_given_correlation_id(self, client: AsyncClient) -> None:
        """Test that a supplied correlation ID is echoed back."""
        response = await client.get(
            "/api/v1/holidays/2025",
            headers={"X-Tenant-ID": "1", "X-Correlation-ID": "corr-777"},
        )

        assert response.headers["X-Correlation-ID"] == "corr-777"

    async def test_generates_correlation_id(self, client: AsyncClient) -> None:
        """Test that a correlation ID is generated when none is supplied."""
        response = await client.get(
            "/api/v1/holidays/2025", headers={"X-Tenant-ID": "1"}
        )

        assert len(response.headers["X-Correlation-ID"]) == 36


@pytest.mark.unit
class TestHealth:
    """Test suite for GET /health."""

    async def test_degraded_without_database(
        self, client: AsyncClient, mocker: MockerFixture
    ) -> None:
        """Test that health reports degraded when the database is down."""
        mocker.patch(
            "complia.api.main.check_database_connection",
            return_value=(False, "connection refused"),
        )

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "degraded", "database": False}

    async def test_healthy(
        self, client: AsyncClient, mocker: MockerFixture
    ) -> None:
        """Test that health reports healthy with a reachable database."""
        mocker.patch(
            "complia.api.main.check_database_connection", return_value=(True, None)
        )
        engine = mocker.patch("complia.api.main.get_engine")
        engine.return_value.pool.checkedout.return_value = 0
        engine.return_value.pool.size.return_value = 10

        response = await client.get("/health")

        assert response.json() == {"status": "healthy", "database": True}


@pytest.mark.unit
class TestORJSONResponse:
    """Test suite for the response class."""

    def test_renders_models_by_alias(self) -> None:
        """Test that pydantic models are rendered with camelCase aliases."""
        response = ORJSONResponse(
            content=GenerateTasksResponse(tasks_created=2, message="done")
        )

        assert orjson.loads(response.body) == {"message": "done", "tasksCreated": 2}

    def test_sorted_keys(self) -> None:
        """Test that response keys are sorted."""
        assert ORJSONResponse(content={"b": 1, "a": 2}).body == b'{"a":2,"b":1}'
