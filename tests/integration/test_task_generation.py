"""End-to-end generation against a migrated PostgreSQL database."""

import asyncio
from datetime import date

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from complia.domain.scheduling.due_dates import DueDateCalculator
from complia.domain.scheduling.holidays import HolidayCalendar, StaticHolidaySource
from complia.domain.scheduling.task_generator import TaskGenerator
from complia.domain.scheduling.types import GenerationResult
from complia.infrastructure.audit import DatabaseAuditSink
from complia.infrastructure.database.models import AuditLogModel, TaskModel
from complia.infrastructure.database.repositories import (
    ComplianceRepository,
    EntityComplianceRepository,
    EntityRepository,
    TaskRepository,
)

CALENDAR = HolidayCalendar(StaticHolidaySource(2024, 2027))


async def _generate(engine: AsyncEngine, entity_id: int, year: int) -> GenerationResult:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        async with session.begin():
            generator = TaskGenerator(
                catalog=ComplianceRepository(session),
                entities=EntityRepository(session),
                assignments=EntityComplianceRepository(session),
                tasks=TaskRepository(session),
                audit=DatabaseAuditSink(session),
                calculator=DueDateCalculator(CALENDAR),
            )
            return await generator.generate(
                tenant_id=1, entity_id=entity_id, year=year, actor_id=42
            )


async def _count(engine: AsyncEngine, model: type) -> int:
    async with AsyncSession(engine) as session:
        result = await session.execute(select(func.count()).select_from(model))
        return int(result.scalar_one())


@pytest.mark.integration
class TestTaskGeneration:
    """Generation through the real repositories."""

    async def test_generation_is_idempotent(
        self, db_engine: AsyncEngine, seeded_entity: int
    ) -> None:
        """Test that a second run for the same year inserts nothing."""
        first = await _generate(db_engine, seeded_entity, 2025)
        second = await _generate(db_engine, seeded_entity, 2025)

        assert first.tasks_created == 3
        assert second.tasks_created == 0
        assert await _count(db_engine, TaskModel) == 3
        assert await _count(db_engine, AuditLogModel) == 1

    async def test_task_rows(self, db_engine: AsyncEngine, seeded_entity: int) -> None:
        """Test that generated rows carry the adjusted dates and task defaults."""
        await _generate(db_engine, seeded_entity, 2025)

        async with AsyncSession(db_engine) as session:
            rows = (
                (await session.execute(select(TaskModel).order_by(TaskModel.due_date)))
                .scalars()
                .all()
            )

        assert [row.due_date for row in rows] == [
            date(2025, 10, 29),
            date(2025, 10, 31),
            date(2025, 11, 28),
        ]
        assert rows[0].period_key == "2025-10"
        assert rows[0].status == "PLANNED"
        assert rows[0].tags == ["ROC", "PRIVATE_LIMITED"]
        assert rows[0].created_by == 42

    async def test_concurrent_generation_creates_each_task_once(
        self, db_engine: AsyncEngine, seeded_entity: int
    ) -> None:
        """Test that the unique constraint absorbs concurrent generation."""
        results = await asyncio.gather(
            *(_generate(db_engine, seeded_entity, 2026) for _ in range(4))
        )

        assert sum(result.tasks_created for result in results) == 3
        assert await _count(db_engine, TaskModel) == 3

    async def test_longest_names_fit_task_title(self, db_engine: AsyncEngine) -> None:
        """Test that maximal compliance and entity names still produce a task."""
        async with AsyncSession(db_engine) as session, session.begin():
            await session.execute(
                text(
                    "INSERT INTO compliances "
                    "(name, category, periodicity, due_date_rule, entity_types) "
                    "VALUES (:name, 'ROC', 'YEARLY', "
                    "'{\"dueMonth\": 10, \"dueDay\": 29}', ARRAY['LLP'])"
                ),
                {"name": "C" * 255},
            )
            result = await session.execute(
                text(
                    "INSERT INTO entities "
                    "(tenant_id, client_id, legal_name, entity_type) "
                    "VALUES (1, 5, :legal_name, 'LLP') RETURNING id"
                ),
                {"legal_name": "E" * 255},
            )
            entity_id = int(result.scalar_one())

        outcome = await _generate(db_engine, entity_id, 2025)

        assert outcome.tasks_created == 1
