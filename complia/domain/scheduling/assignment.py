"""Assigning applicable compliances to entities."""

from loguru import logger

from complia.core.constants import AUDIT_ACTION_COMPLIANCES_ASSIGNED
from complia.core.exceptions import NotFoundError
from complia.domain.scheduling.applicability import match_applicable, merge_settings
from complia.domain.scheduling.ports import (
    AssignmentStore,
    AuditSink,
    ComplianceCatalog,
    EntityDirectory,
)
from complia.domain.scheduling.types import ApplicableCompliance, AuditEvent, Entity


class ComplianceAssignmentService:
    """Links entities to the catalog compliances that apply to them."""

    def __init__(
        self,
        *,
        catalog: ComplianceCatalog,
        entities: EntityDirectory,
        assignments: AssignmentStore,
        audit: AuditSink,
    ) -> None:
        self._catalog = catalog
        self._entities = entities
        self._assignments = assignments
        self._audit = audit

    async def assign_applicable(self, entity: Entity) -> int:
        """Insert default settings for every matching compliance.

        Best effort: failures are logged and reported as zero assignments so
        entity onboarding is never blocked.

        Returns:
            int: Number of new entity-compliance rows.
        """
        try:
            matched = match_applicable(
                await self._catalog.list_active(), entity.entity_type
            )
            if not matched:
                return 0
            assigned = await self._assignments.insert_missing(
                entity.id, [compliance.id for compliance in matched]
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Failed to assign applicable compliances: {}",
                exc,
                entity_id=entity.id,
                entity_type=entity.entity_type,
            )
            return 0

        logger.info(
            "Assigned {} applicable compliances",
            assigned,
            entity_id=entity.id,
            entity_type=entity.entity_type,
            matched=len(matched),
        )
        return assigned

    async def assign_for(
        self, tenant_id: int, entity_id: int, actor_id: int | None = None
    ) -> int:
        """Resolve a tenant's entity and assign its applicable compliances.

        Raises:
            NotFoundError: If the entity does not exist for the tenant.
        """
        entity = await self._require_entity(tenant_id, entity_id)
        assigned = await self.assign_applicable(entity)
        if assigned:
            event = AuditEvent(
                tenant_id=tenant_id,
                user_id=actor_id,
                action=AUDIT_ACTION_COMPLIANCES_ASSIGNED,
                target_type="Entity",
                target_id=entity.id,
                new_values={"count": assigned},
            )
            try:
                await self._audit.record(event)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Audit event for assignment failed: {}", exc, entity_id=entity.id
                )
        return assigned

    async def applicable_for(
        self, tenant_id: int, entity_id: int
    ) -> list[ApplicableCompliance]:
        """Matching compliances with the entity's settings merged in.

        Raises:
            NotFoundError: If the entity does not exist for the tenant.
        """
        entity = await self._require_entity(tenant_id, entity_id)
        matched = match_applicable(await self._catalog.list_active(), entity.entity_type)
        settings = {
            setting.compliance_id: setting
            for setting in await self._assignments.list_for_entity(entity.id)
        }
        return merge_settings(matched, settings)

    async def _require_entity(self, tenant_id: int, entity_id: int) -> Entity:
        entity = await self._entities.get_for_tenant(tenant_id, entity_id)
        if entity is None:
            raise NotFoundError("Entity not found", context={"entity_id": entity_id})
        return entity
