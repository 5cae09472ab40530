"""Audit sink writing to the ``audit_logs`` table."""

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from complia.core.context import RequestContext
from complia.domain.scheduling.types import AuditEvent
from complia.infrastructure.database.models import AuditLogModel


class DatabaseAuditSink:
    """Records audit events in the request's transaction.

    Each write runs in a savepoint; a failed write is rolled back to the
    savepoint and logged, and the surrounding transaction carries on.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record(self, event: AuditEvent) -> None:
        entry = AuditLogModel(
            tenant_id=event.tenant_id,
            user_id=(
                event.user_id
                if event.user_id is not None
                else RequestContext.get_user_id()
            ),
            action=event.action,
            target_type=event.target_type,
            target_id=event.target_id,
            new_values=dict(event.new_values),
            request_id=RequestContext.get_correlation_id(),
        )
        try:
            async with self.session.begin_nested():
                self.session.add(entry)
                await self.session.flush()
        except SQLAlchemyError as exc:
            logger.error(
                "Failed to write audit log: {}",
                exc,
                tenant_id=event.tenant_id,
                action=event.action,
                target_id=event.target_id,
            )
            return
        logger.debug(
            "Audit log written",
            tenant_id=event.tenant_id,
            action=event.action,
            target_id=event.target_id,
        )
