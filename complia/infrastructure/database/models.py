"""ORM models for the compliance catalog, entities, tasks and audit trail.

Each model converts itself into the matching scheduling value type with
``to_domain`` so nothing above the repositories sees ORM instances.
"""

from datetime import date
from typing import Any

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    text,
    true,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from complia.domain.scheduling.enums import TaskPriority
from complia.domain.scheduling.types import (
    Compliance,
    Entity,
    EntityComplianceSetting,
)
from complia.infrastructure.constants import TASK_UNIQUE_COLUMNS
from complia.infrastructure.database.base import BaseModel


class ComplianceModel(BaseModel):
    """Catalog obligation shared by all tenants."""

    __tablename__ = "compliances"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    act_name: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    periodicity: Mapped[str] = mapped_column(String(32), nullable=False)
    due_date_rule: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB, server_default=text("'{}'::jsonb")
    )
    entity_types: Mapped[list[str]] = mapped_column(
        ARRAY(String(64)), nullable=False, server_default=text("'{}'")
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    def to_domain(self) -> Compliance:
        return Compliance(
            id=self.id,
            name=self.name,
            category=self.category,
            periodicity=self.periodicity,
            entity_types=frozenset(self.entity_types or ()),
            due_date_rule=self.due_date_rule,
            is_active=self.is_active,
            description=self.description,
        )


class EntityModel(BaseModel):
    """Legal entity belonging to a tenant's client."""

    __tablename__ = "entities"

    tenant_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    client_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    legal_name: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)

    def to_domain(self) -> Entity:
        return Entity(
            id=self.id,
            tenant_id=self.tenant_id,
            client_id=self.client_id,
            entity_type=self.entity_type,
            legal_name=self.legal_name,
        )


class EntityComplianceModel(BaseModel):
    """Per-entity settings for one compliance."""

    __tablename__ = "entity_compliances"
    __table_args__ = (UniqueConstraint("entity_id", "compliance_id"),)

    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    compliance_id: Mapped[int] = mapped_column(
        ForeignKey("compliances.id", ondelete="CASCADE"), nullable=False
    )
    is_applicable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    custom_due_date: Mapped[date | None] = mapped_column(Date)
    assignee_id: Mapped[int | None] = mapped_column(BigInteger)
    priority: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
        server_default=TaskPriority.MEDIUM.value,
    )
    notes: Mapped[str | None] = mapped_column(Text)

    def to_domain(self) -> EntityComplianceSetting:
        return EntityComplianceSetting(
            entity_id=self.entity_id,
            compliance_id=self.compliance_id,
            is_applicable=self.is_applicable,
            custom_due_date=self.custom_due_date,
            assignee_id=self.assignee_id,
            priority=TaskPriority(self.priority),
            notes=self.notes,
        )


class TaskModel(BaseModel):
    """Generated or manual task.

    At most one row exists per (tenant, entity, compliance, period); the
    constraint is what makes concurrent generation idempotent.
    """

    __tablename__ = "tasks"
    __table_args__ = (UniqueConstraint(*TASK_UNIQUE_COLUMNS),)

    tenant_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    client_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    entity_id: Mapped[int] = mapped_column(
        ForeignKey("entities.id", ondelete="CASCADE"), nullable=False
    )
    compliance_id: Mapped[int | None] = mapped_column(
        ForeignKey("compliances.id", ondelete="SET NULL")
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    task_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    priority: Mapped[str] = mapped_column(String(16), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    period_key: Mapped[str | None] = mapped_column(String(7))
    assignee_id: Mapped[int | None] = mapped_column(BigInteger)
    created_by: Mapped[int | None] = mapped_column(BigInteger)
    tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(64)), nullable=False, server_default=text("'{}'")
    )


class AuditLogModel(BaseModel):
    """Append-only audit trail entry."""

    __tablename__ = "audit_logs"

    tenant_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(BigInteger)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    target_type: Mapped[str] = mapped_column(String(64), nullable=False)
    target_id: Mapped[int | None] = mapped_column(BigInteger)
    new_values: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    request_id: Mapped[str | None] = mapped_column(String(64))
