"""Unit tests for the database audit sink."""

import pytest
from pytest_mock import MockerFixture
from sqlalchemy.exc import OperationalError

from complia.core.constants import AUDIT_ACTION_TASKS_GENERATED
from complia.core.context import RequestContext
from complia.domain.scheduling.types import AuditEvent
from complia.infrastructure.audit import DatabaseAuditSink
from complia.infrastructure.database.models import AuditLogModel


@pytest.fixture
def event() -> AuditEvent:
    return AuditEvent(
        tenant_id=1,
        user_id=42,
        action=AUDIT_ACTION_TASKS_GENERATED,
        target_type="Entity",
        target_id=10,
        new_values={"year": 2025, "complianceIds": None, "count": 12},
    )


@pytest.mark.unit
class TestDatabaseAuditSink:
    """Test suite for DatabaseAuditSink."""

    async def test_writes_row_in_savepoint(
        self, mocker: MockerFixture, event: AuditEvent
    ) -> None:
        """Test that the audit row is written in a savepoint."""
        session = mocker.MagicMock()
        session.flush = mocker.AsyncMock()
        RequestContext.set_correlation_id("corr-123")

        await DatabaseAuditSink(session).record(event)

        session.begin_nested.assert_called_once()
        entry = session.add.call_args.args[0]
        assert isinstance(entry, AuditLogModel)
        assert entry.action == AUDIT_ACTION_TASKS_GENERATED
        assert entry.target_id == 10
        assert entry.new_values == {"year": 2025, "complianceIds": None, "count": 12}
        assert entry.request_id == "corr-123"
        session.flush.assert_awaited_once()

    async def test_write_failure_is_logged_not_raised(
        self, mocker: MockerFixture, event: AuditEvent
    ) -> None:
        """Test that a write failure is logged, not raised."""
        session = mocker.MagicMock()
        session.flush = mocker.AsyncMock(
            side_effect=OperationalError("INSERT", {}, OSError("gone"))
        )
        mock_logger = mocker.patch("complia.infrastructure.audit.logger")

        await DatabaseAuditSink(session).record(event)

        mock_logger.error.assert_called_once()

    async def test_actor_falls_back_to_request_identity(
        self, mocker: MockerFixture
    ) -> None:
        """Test that an event without an actor is attributed to the request user."""
        session = mocker.MagicMock()
        session.flush = mocker.AsyncMock()
        RequestContext.set_identity(1, 77)

        await DatabaseAuditSink(session).record(
            AuditEvent(
                tenant_id=1,
                action=AUDIT_ACTION_TASKS_GENERATED,
                target_type="Entity",
            )
        )

        assert session.add.call_args.args[0].user_id == 77

    async def test_event_actor_wins_over_request_identity(
        self, mocker: MockerFixture, event: AuditEvent
    ) -> None:
        """Test that an explicit actor on the event is kept."""
        session = mocker.MagicMock()
        session.flush = mocker.AsyncMock()
        RequestContext.set_identity(1, 77)

        await DatabaseAuditSink(session).record(event)

        assert session.add.call_args.args[0].user_id == 42
