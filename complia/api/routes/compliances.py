"""Due date preview for a catalog compliance."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query

from complia.api.dependencies import Calculator, Catalog, Tenant
from complia.api.schemas.scheduling import DueDatePreviewResponse
from complia.core.exceptions import NotFoundError
from complia.domain.scheduling.task_generator import MAX_YEAR, MIN_YEAR
from complia.domain.scheduling.types import DueDateRule

router = APIRouter(prefix="/compliances", tags=["compliances"])


@router.get("/{compliance_id}/due-dates", response_model=DueDatePreviewResponse)
async def preview_due_dates(
    compliance_id: int,
    tenant: Tenant,  # noqa: ARG001 - identity is required on every scheduling route
    catalog: Catalog,
    calculator: Calculator,
    year: Annotated[int | None, Query(ge=MIN_YEAR, le=MAX_YEAR)] = None,
) -> DueDatePreviewResponse:
    """Adjusted due dates a compliance would get in ``year``.

    Unlike generation, a malformed rule is reported to the caller.
    """
    compliance = await catalog.get(compliance_id)
    if compliance is None:
        raise NotFoundError(
            "Compliance not found", context={"compliance_id": compliance_id}
        )
    DueDateRule.parse(compliance.due_date_rule)

    target_year = year if year is not None else date.today().year
    return DueDatePreviewResponse(
        compliance_id=compliance_id,
        year=target_year,
        due_dates=calculator.calculate_due_dates(compliance, target_year),
    )
