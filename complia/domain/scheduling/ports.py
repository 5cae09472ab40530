"""Storage interfaces the scheduling services depend on.

The database repositories implement these; unit tests use in-memory fakes.
"""

from collections.abc import Sequence
from typing import Protocol

from complia.domain.scheduling.types import (
    AuditEvent,
    Compliance,
    Entity,
    EntityComplianceSetting,
    NewTask,
)


class ComplianceCatalog(Protocol):
    """Read access to the compliance catalog."""

    async def list_active(self) -> list[Compliance]: ...

    async def get_active_by_ids(self, compliance_ids: Sequence[int]) -> list[Compliance]: ...

    async def get(self, compliance_id: int) -> Compliance | None: ...


class EntityDirectory(Protocol):
    """Tenant-scoped entity lookup."""

    async def get_for_tenant(self, tenant_id: int, entity_id: int) -> Entity | None: ...


class AssignmentStore(Protocol):
    """Per-entity compliance settings."""

    async def list_for_entity(self, entity_id: int) -> list[EntityComplianceSetting]: ...

    async def insert_missing(self, entity_id: int, compliance_ids: Sequence[int]) -> int:
        """Insert default rows for pairs that do not exist yet; return how many."""
        ...


class TaskStore(Protocol):
    """Task persistence with a (tenant, entity, compliance, period) uniqueness rule."""

    async def find_for_period(
        self, tenant_id: int, entity_id: int, compliance_id: int, period_key: str
    ) -> int | None:
        """Return the id of the existing task for the period, if any."""
        ...

    async def bulk_insert(self, tasks: Sequence[NewTask]) -> int:
        """Insert tasks, skipping duplicates; return the number inserted."""
        ...


class AuditSink(Protocol):
    """Fire-and-forget audit trail."""

    async def record(self, event: AuditEvent) -> None: ...
