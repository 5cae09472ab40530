"""Request and response bodies for the scheduling endpoints.

Bodies use camelCase on the wire and snake_case in Python.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from complia.domain.scheduling.enums import TaskPriority
from complia.domain.scheduling.holidays import Holiday
from complia.domain.scheduling.types import ApplicableCompliance


class CamelModel(BaseModel):
    """Base for bodies serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateTasksRequest(CamelModel):
    entity_id: int = Field(..., gt=0, description="Entity to generate tasks for")
    year: int | None = Field(
        default=None, description="Calendar year, defaults to the current year"
    )
    compliance_ids: list[int] | None = Field(
        default=None, description="Restrict generation to these compliances"
    )


class GenerateTasksResponse(CamelModel):
    tasks_created: int
    message: str


class AssignCompliancesResponse(CamelModel):
    assigned: int


class ApplicableComplianceOut(CamelModel):
    compliance_id: int
    name: str
    category: str
    periodicity: str
    description: str | None = None
    is_applicable: bool
    custom_due_date: date | None = None
    assignee_id: int | None = None
    priority: TaskPriority
    notes: str | None = None

    @classmethod
    def from_domain(cls, item: ApplicableCompliance) -> "ApplicableComplianceOut":
        compliance = item.compliance
        return cls(
            compliance_id=compliance.id,
            name=compliance.name,
            category=compliance.category,
            periodicity=compliance.periodicity,
            description=compliance.description,
            is_applicable=item.is_applicable,
            custom_due_date=item.custom_due_date,
            assignee_id=item.assignee_id,
            priority=item.priority,
            notes=item.notes,
        )


class ApplicableCompliancesResponse(CamelModel):
    entity_id: int
    compliances: list[ApplicableComplianceOut]


class DueDatePreviewResponse(CamelModel):
    compliance_id: int
    year: int
    due_dates: list[date]


class HolidayOut(CamelModel):
    date: date
    name: str
    is_national: bool

    @classmethod
    def from_domain(cls, holiday: Holiday) -> "HolidayOut":
        return cls(date=holiday.date, name=holiday.name, is_national=holiday.is_national)


class HolidaysResponse(CamelModel):
    year: int
    covered: bool
    holidays: list[HolidayOut]
