"""FastAPI dependencies: caller identity and scheduling service wiring."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, Request

from complia.core.constants import TENANT_ID_HEADER, USER_ID_HEADER
from complia.core.context import RequestContext
from complia.core.exceptions import UnauthorizedError
from complia.domain.scheduling.assignment import ComplianceAssignmentService
from complia.domain.scheduling.due_dates import DueDateCalculator
from complia.domain.scheduling.holidays import HolidayCalendar
from complia.domain.scheduling.task_generator import TaskGenerator
from complia.infrastructure.audit import DatabaseAuditSink
from complia.infrastructure.database.dependencies import DatabaseSession
from complia.infrastructure.database.repositories import (
    ComplianceRepository,
    EntityComplianceRepository,
    EntityRepository,
    TaskRepository,
)


@dataclass(frozen=True, slots=True)
class TenantContext:
    """Identity forwarded by the upstream gateway."""

    tenant_id: int
    user_id: int | None = None


async def get_tenant_context(
    x_tenant_id: Annotated[int | None, Header(alias=TENANT_ID_HEADER)] = None,
    x_user_id: Annotated[int | None, Header(alias=USER_ID_HEADER)] = None,
) -> TenantContext:
    """Read the tenant and acting user from the identity headers.

    Raises:
        UnauthorizedError: If the tenant header is missing.
    """
    if x_tenant_id is None:
        raise UnauthorizedError(
            "Missing tenant identity", context={"header": TENANT_ID_HEADER}
        )
    RequestContext.set_identity(x_tenant_id, x_user_id)
    return TenantContext(tenant_id=x_tenant_id, user_id=x_user_id)


def get_holiday_calendar(request: Request) -> HolidayCalendar:
    """The calendar built at application startup."""
    return request.app.state.holiday_calendar


def get_due_date_calculator(
    calendar: Annotated[HolidayCalendar, Depends(get_holiday_calendar)],
) -> DueDateCalculator:
    return DueDateCalculator(calendar)


def get_compliance_repository(db: DatabaseSession) -> ComplianceRepository:
    return ComplianceRepository(db)


def get_task_generator(
    db: DatabaseSession,
    calculator: Annotated[DueDateCalculator, Depends(get_due_date_calculator)],
) -> TaskGenerator:
    return TaskGenerator(
        catalog=ComplianceRepository(db),
        entities=EntityRepository(db),
        assignments=EntityComplianceRepository(db),
        tasks=TaskRepository(db),
        audit=DatabaseAuditSink(db),
        calculator=calculator,
    )


def get_assignment_service(db: DatabaseSession) -> ComplianceAssignmentService:
    return ComplianceAssignmentService(
        catalog=ComplianceRepository(db),
        entities=EntityRepository(db),
        assignments=EntityComplianceRepository(db),
        audit=DatabaseAuditSink(db),
    )


Tenant = Annotated[TenantContext, Depends(get_tenant_context)]
Calendar = Annotated[HolidayCalendar, Depends(get_holiday_calendar)]
Calculator = Annotated[DueDateCalculator, Depends(get_due_date_calculator)]
Catalog = Annotated[ComplianceRepository, Depends(get_compliance_repository)]
Generator = Annotated[TaskGenerator, Depends(get_task_generator)]
Assignments = Annotated[ComplianceAssignmentService, Depends(get_assignment_service)]
