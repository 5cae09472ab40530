"""PostgreSQL implementations of the scheduling storage ports."""

from collections.abc import Sequence
from typing import Any

from loguru import logger
from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from complia.core.exceptions import StoreError
from complia.domain.scheduling.types import (
    Compliance,
    Entity,
    EntityComplianceSetting,
    NewTask,
)
from complia.infrastructure.constants import (
    TASK_UNIQUE_COLUMNS,
    UNIQUE_VIOLATION_SQLSTATE,
)
from complia.infrastructure.database.models import (
    ComplianceModel,
    EntityComplianceModel,
    EntityModel,
    TaskModel,
)
from complia.infrastructure.database.repository import BaseRepository


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether an IntegrityError was raised by a unique constraint."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == UNIQUE_VIOLATION_SQLSTATE


class ComplianceRepository(BaseRepository[ComplianceModel]):
    """Catalog reads."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ComplianceModel)

    async def list_active(self) -> list[Compliance]:
        stmt = (
            select(ComplianceModel)
            .where(ComplianceModel.is_active.is_(True))
            .order_by(ComplianceModel.category, ComplianceModel.name)
        )
        result = await self.session.execute(stmt)
        return [row.to_domain() for row in result.scalars().all()]

    async def get_active_by_ids(self, compliance_ids: Sequence[int]) -> list[Compliance]:
        if not compliance_ids:
            return []
        stmt = select(ComplianceModel).where(
            ComplianceModel.id.in_(list(compliance_ids)),
            ComplianceModel.is_active.is_(True),
        )
        result = await self.session.execute(stmt)
        return [row.to_domain() for row in result.scalars().all()]

    async def get(self, compliance_id: int) -> Compliance | None:
        row = await self.get_by_id(compliance_id)
        return row.to_domain() if row else None


class EntityRepository(BaseRepository[EntityModel]):
    """Tenant-scoped entity reads."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EntityModel)

    async def get_for_tenant(self, tenant_id: int, entity_id: int) -> Entity | None:
        row = await self.find_one_by(id=entity_id, tenant_id=tenant_id)
        return row.to_domain() if row else None


class EntityComplianceRepository(BaseRepository[EntityComplianceModel]):
    """Per-entity compliance settings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, EntityComplianceModel)

    async def list_for_entity(self, entity_id: int) -> list[EntityComplianceSetting]:
        rows = await self.filter_by(entity_id=entity_id)
        return [row.to_domain() for row in rows]

    async def insert_missing(self, entity_id: int, compliance_ids: Sequence[int]) -> int:
        """Insert default settings rows, skipping pairs that already exist.

        Runs in a savepoint so a failure leaves the request transaction usable.
        """
        if not compliance_ids:
            return 0
        stmt = (
            pg_insert(EntityComplianceModel)
            .values(
                [
                    {"entity_id": entity_id, "compliance_id": compliance_id}
                    for compliance_id in compliance_ids
                ]
            )
            .on_conflict_do_nothing(index_elements=["entity_id", "compliance_id"])
            .returning(EntityComplianceModel.id)
        )
        async with self.session.begin_nested():
            result = await self.session.execute(stmt)
            inserted = len(result.scalars().all())
        logger.debug(
            "Inserted {} entity compliance rows",
            inserted,
            entity_id=entity_id,
            requested=len(compliance_ids),
        )
        return inserted


class TaskRepository(BaseRepository[TaskModel]):
    """Task store enforcing one task per (tenant, entity, compliance, period)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TaskModel)

    async def find_for_period(
        self, tenant_id: int, entity_id: int, compliance_id: int, period_key: str
    ) -> int | None:
        stmt = (
            select(TaskModel.id)
            .where(
                TaskModel.tenant_id == tenant_id,
                TaskModel.entity_id == entity_id,
                TaskModel.compliance_id == compliance_id,
                TaskModel.period_key == period_key,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def bulk_insert(self, tasks: Sequence[NewTask]) -> int:
        """Insert staged tasks; rows that already exist are skipped.

        Returns:
            int: Number of rows actually inserted.

        Raises:
            StoreError: If the insert fails for any reason other than a
                uniqueness violation.
        """
        if not tasks:
            return 0
        rows = [task.as_row() for task in tasks]
        stmt = (
            pg_insert(TaskModel)
            .values(rows)
            .on_conflict_do_nothing(index_elements=list(TASK_UNIQUE_COLUMNS))
            .returning(TaskModel.id)
        )
        try:
            async with self.session.begin_nested():
                result = await self.session.execute(stmt)
                inserted = len(result.scalars().all())
        except IntegrityError as exc:
            if not is_unique_violation(exc):
                raise StoreError(
                    "Failed to insert generated tasks",
                    context={"task_count": len(rows)},
                    cause=exc,
                ) from exc
            logger.info(
                "Bulk task insert hit a uniqueness violation, retrying row by row",
                task_count=len(rows),
            )
            inserted = await self._insert_each(rows)
        except SQLAlchemyError as exc:
            raise StoreError(
                "Failed to insert generated tasks",
                context={"task_count": len(rows)},
                cause=exc,
            ) from exc

        skipped = len(rows) - inserted
        if skipped:
            logger.debug(
                "Skipped {} tasks that were already generated",
                skipped,
                task_count=len(rows),
            )
        return inserted

    async def _insert_each(self, rows: Sequence[dict[str, Any]]) -> int:
        inserted = 0
        for row in rows:
            try:
                async with self.session.begin_nested():
                    await self.session.execute(insert(TaskModel).values(**row))
            except IntegrityError as exc:
                if is_unique_violation(exc):
                    continue
                raise StoreError(
                    "Failed to insert generated task",
                    context={"period_key": row["period_key"]},
                    cause=exc,
                ) from exc
            except SQLAlchemyError as exc:
                raise StoreError(
                    "Failed to insert generated task",
                    context={"period_key": row["period_key"]},
                    cause=exc,
                ) from exc
            inserted += 1
        return inserted
