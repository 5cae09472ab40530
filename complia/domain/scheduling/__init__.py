"""Compliance scheduling: due dates, holidays, applicability and task generation."""

from complia.domain.scheduling.applicability import match_applicable, merge_settings
from complia.domain.scheduling.assignment import ComplianceAssignmentService
from complia.domain.scheduling.due_dates import DueDateCalculator
from complia.domain.scheduling.enums import (
    Periodicity,
    TaskPriority,
    TaskStatus,
    TaskType,
)
from complia.domain.scheduling.holidays import (
    Holiday,
    HolidayCalendar,
    HolidaySource,
    StaticHolidaySource,
    build_holiday_calendar,
)
from complia.domain.scheduling.task_generator import TaskGenerator
from complia.domain.scheduling.types import (
    ApplicableCompliance,
    AuditEvent,
    Compliance,
    DueDateRule,
    Entity,
    EntityComplianceSetting,
    GenerationResult,
    NewTask,
    period_key,
)

__all__ = [
    "ApplicableCompliance",
    "AuditEvent",
    "Compliance",
    "ComplianceAssignmentService",
    "DueDateCalculator",
    "DueDateRule",
    "Entity",
    "EntityComplianceSetting",
    "GenerationResult",
    "Holiday",
    "HolidayCalendar",
    "HolidaySource",
    "NewTask",
    "Periodicity",
    "StaticHolidaySource",
    "TaskGenerator",
    "TaskPriority",
    "TaskStatus",
    "TaskType",
    "build_holiday_calendar",
    "match_applicable",
    "merge_settings",
    "period_key",
]
