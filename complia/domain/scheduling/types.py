"""Value types for compliance scheduling.

Rows coming out of storage are converted into these frozen dataclasses so the
scheduling code never touches ORM objects or sessions.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from complia.core.constants import DEFAULT_DAY_OF_WEEK, DEFAULT_DUE_DAY, DEFAULT_DUE_MONTH
from complia.core.exceptions import ValidationError
from complia.domain.scheduling.enums import TaskPriority, TaskStatus, TaskType


class DueDateRule(BaseModel):
    """Parameters that place a compliance's due dates inside a year.

    The stored payload uses camelCase keys (``dueDay``, ``dueMonth``,
    ``dayOfWeek``, ``specificDate``). Missing keys fall back to the 15th,
    April and Monday respectively. ``dayOfWeek`` counts from 0 for Sunday.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    due_day: int | None = Field(default=None, ge=1, le=31, alias="dueDay")
    due_month: int | None = Field(default=None, ge=1, le=12, alias="dueMonth")
    day_of_week: int | None = Field(default=None, ge=0, le=6, alias="dayOfWeek")
    specific_date: date | None = Field(default=None, alias="specificDate")

    @field_validator("specific_date", mode="before")
    @classmethod
    def _truncate_timestamp(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and "T" in value:
            return datetime.fromisoformat(value).date()
        return value

    @property
    def day(self) -> int:
        return self.due_day or DEFAULT_DUE_DAY

    @property
    def month(self) -> int:
        return self.due_month or DEFAULT_DUE_MONTH

    @property
    def weekday(self) -> int:
        """Target weekday in Python numbering (Monday is 0)."""
        day_of_week = (
            DEFAULT_DAY_OF_WEEK if self.day_of_week is None else self.day_of_week
        )
        return (day_of_week - 1) % 7

    @classmethod
    def parse(cls, payload: Mapping[str, Any] | None) -> "DueDateRule":
        """Validate a stored rule payload.

        Args:
            payload: Raw rule mapping, or None for an empty rule.

        Returns:
            DueDateRule: The parsed rule.

        Raises:
            ValidationError: If the payload is not a mapping or a value is
                out of range.
        """
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise ValidationError(
                "Due date rule must be an object",
                context={"payload_type": type(payload).__name__},
            )
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as exc:
            errors = {
                ".".join(str(part) for part in error["loc"]): error["msg"]
                for error in exc.errors()
            }
            raise ValidationError(
                "Malformed due date rule", context={"errors": errors}, cause=exc
            ) from exc


def period_key(due_date: date) -> str:
    """Return the ``YYYY-MM`` period a due date belongs to."""
    return f"{due_date.year:04d}-{due_date.month:02d}"


@dataclass(frozen=True, slots=True)
class Compliance:
    """A catalog obligation."""

    id: int
    name: str
    category: str
    periodicity: str
    entity_types: frozenset[str]
    due_date_rule: Mapping[str, Any] | None = None
    is_active: bool = True
    description: str | None = None


@dataclass(frozen=True, slots=True)
class Entity:
    """A legal entity owned by a tenant's client."""

    id: int
    tenant_id: int
    client_id: int
    entity_type: str
    legal_name: str


@dataclass(frozen=True, slots=True)
class EntityComplianceSetting:
    """Per-entity override for one compliance."""

    entity_id: int
    compliance_id: int
    is_applicable: bool = True
    custom_due_date: date | None = None
    assignee_id: int | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class ApplicableCompliance:
    """A matching compliance merged with the entity's setting, if any."""

    compliance: Compliance
    is_applicable: bool = True
    assignee_id: int | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    custom_due_date: date | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class NewTask:
    """A staged task that has not been written yet."""

    tenant_id: int
    client_id: int
    entity_id: int
    compliance_id: int
    title: str
    due_date: date
    period_key: str
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assignee_id: int | None = None
    created_by: int | None = None
    tags: tuple[str, ...] = ()
    status: TaskStatus = TaskStatus.PLANNED
    task_type: TaskType = TaskType.COMPLIANCE

    def as_row(self) -> dict[str, Any]:
        """Column values for an insert statement."""
        return {
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "entity_id": self.entity_id,
            "compliance_id": self.compliance_id,
            "title": self.title,
            "description": self.description,
            "task_type": self.task_type.value,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": self.due_date,
            "period_key": self.period_key,
            "assignee_id": self.assignee_id,
            "created_by": self.created_by,
            "tags": list(self.tags),
        }


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """One audit trail entry."""

    tenant_id: int
    action: str
    target_type: str
    target_id: int | None = None
    user_id: int | None = None
    new_values: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Outcome of one task generation call."""

    tasks_created: int
    message: str

    @classmethod
    def for_count(cls, count: int) -> "GenerationResult":
        if count == 0:
            return cls(tasks_created=0, message="No new tasks to generate")
        return cls(tasks_created=count, message=f"{count} tasks generated successfully")
