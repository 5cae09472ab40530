"""Task generation for an entity and year.

Generation is idempotent: a task is staged only when the store has none for
the same (tenant, entity, compliance, period), and the store's uniqueness rule
absorbs races between concurrent calls.
"""

from collections.abc import Mapping, Sequence
from typing import Final

from loguru import logger

from complia.core.constants import AUDIT_ACTION_TASKS_GENERATED
from complia.core.exceptions import NotFoundError, ValidationError
from complia.core.observability import trace_operation
from complia.domain.scheduling.applicability import match_applicable
from complia.domain.scheduling.due_dates import DueDateCalculator
from complia.domain.scheduling.enums import TaskPriority
from complia.domain.scheduling.ports import (
    AssignmentStore,
    AuditSink,
    ComplianceCatalog,
    EntityDirectory,
    TaskStore,
)
from complia.domain.scheduling.types import (
    AuditEvent,
    Compliance,
    Entity,
    EntityComplianceSetting,
    GenerationResult,
    NewTask,
    period_key,
)

MIN_YEAR: Final[int] = 1900
MAX_YEAR: Final[int] = 9998


class TaskGenerator:
    """Creates the missing compliance tasks for one entity and year."""

    def __init__(
        self,
        *,
        catalog: ComplianceCatalog,
        entities: EntityDirectory,
        assignments: AssignmentStore,
        tasks: TaskStore,
        audit: AuditSink,
        calculator: DueDateCalculator,
    ) -> None:
        self._catalog = catalog
        self._entities = entities
        self._assignments = assignments
        self._tasks = tasks
        self._audit = audit
        self._calculator = calculator

    async def generate(
        self,
        *,
        tenant_id: int,
        entity_id: int,
        year: int,
        compliance_ids: Sequence[int] | None = None,
        actor_id: int | None = None,
    ) -> GenerationResult:
        """Generate tasks for every applicable compliance of an entity.

        Args:
            tenant_id: Tenant that owns the entity.
            entity_id: Entity to generate for.
            year: Calendar year of the due dates.
            compliance_ids: Restrict generation to these compliances. When
                omitted the entity type decides.
            actor_id: User recorded as creator and in the audit trail.

        Returns:
            GenerationResult: Created count and a summary message.

        Raises:
            ValidationError: If the year is out of range or a requested
                compliance is unknown or inactive.
            NotFoundError: If the entity does not exist for the tenant.
            StoreError: If the task insert fails for a reason other than a
                duplicate.
        """
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValidationError(
                f"Year must be between {MIN_YEAR} and {MAX_YEAR}",
                context={"year": year},
            )

        with trace_operation(
            "tasks.generate", tenant_id=tenant_id, entity_id=entity_id, year=year
        ) as span:
            entity = await self._entities.get_for_tenant(tenant_id, entity_id)
            if entity is None:
                raise NotFoundError(
                    "Entity not found", context={"entity_id": entity_id}
                )

            settings = {
                setting.compliance_id: setting
                for setting in await self._assignments.list_for_entity(entity.id)
            }
            compliances = await self._resolve_compliances(
                entity, compliance_ids, settings
            )
            staged = await self._stage(entity, compliances, settings, year, actor_id)
            created = await self._tasks.bulk_insert(staged) if staged else 0
            span.set_attribute("tasks_created", created)

        if created:
            await self._record_audit(entity, year, compliance_ids, created, actor_id)

        logger.info(
            "Task generation finished",
            tenant_id=tenant_id,
            entity_id=entity_id,
            year=year,
            compliances=len(compliances),
            staged=len(staged),
            tasks_created=created,
        )
        return GenerationResult.for_count(created)

    async def _resolve_compliances(
        self,
        entity: Entity,
        compliance_ids: Sequence[int] | None,
        settings: Mapping[int, EntityComplianceSetting],
    ) -> list[Compliance]:
        if compliance_ids:
            requested = list(dict.fromkeys(compliance_ids))
            found = {
                compliance.id: compliance
                for compliance in await self._catalog.get_active_by_ids(requested)
            }
            missing = [cid for cid in requested if cid not in found]
            if missing:
                raise ValidationError(
                    "Unknown or inactive compliances requested",
                    context={"compliance_ids": missing},
                )
            return [found[cid] for cid in requested]

        matched = match_applicable(await self._catalog.list_active(), entity.entity_type)
        return [
            compliance
            for compliance in matched
            if compliance.id not in settings or settings[compliance.id].is_applicable
        ]

    async def _stage(
        self,
        entity: Entity,
        compliances: Sequence[Compliance],
        settings: Mapping[int, EntityComplianceSetting],
        year: int,
        actor_id: int | None,
    ) -> list[NewTask]:
        staged: list[NewTask] = []
        for compliance in compliances:
            setting = settings.get(compliance.id)
            seen_periods: set[str] = set()
            for due_date in self._calculator.calculate_due_dates(compliance, year):
                key = period_key(due_date)
                if key in seen_periods:
                    continue
                seen_periods.add(key)

                existing = await self._tasks.find_for_period(
                    entity.tenant_id, entity.id, compliance.id, key
                )
                if existing is not None:
                    continue

                staged.append(
                    NewTask(
                        tenant_id=entity.tenant_id,
                        client_id=entity.client_id,
                        entity_id=entity.id,
                        compliance_id=compliance.id,
                        title=f"{compliance.name} - {entity.legal_name}",
                        description=compliance.description,
                        due_date=due_date,
                        period_key=key,
                        priority=setting.priority if setting else TaskPriority.MEDIUM,
                        assignee_id=setting.assignee_id if setting else None,
                        created_by=actor_id,
                        tags=(compliance.category, entity.entity_type),
                    )
                )
        return staged

    async def _record_audit(
        self,
        entity: Entity,
        year: int,
        compliance_ids: Sequence[int] | None,
        count: int,
        actor_id: int | None,
    ) -> None:
        event = AuditEvent(
            tenant_id=entity.tenant_id,
            user_id=actor_id,
            action=AUDIT_ACTION_TASKS_GENERATED,
            target_type="Entity",
            target_id=entity.id,
            new_values={
                "year": year,
                "complianceIds": list(compliance_ids) if compliance_ids else None,
                "count": count,
            },
        )
        try:
            await self._audit.record(event)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Audit event for task generation failed: {}",
                exc,
                entity_id=entity.id,
                year=year,
                error_type=type(exc).__name__,
            )
