"""Holiday listing."""

from typing import Annotated

from fastapi import APIRouter, Path

from complia.api.dependencies import Calendar, Tenant
from complia.api.schemas.scheduling import HolidayOut, HolidaysResponse

router = APIRouter(prefix="/holidays", tags=["holidays"])


@router.get("/{year}", response_model=HolidaysResponse)
async def list_holidays(
    year: Annotated[int, Path(ge=1, le=9999)],
    tenant: Tenant,  # noqa: ARG001 - identity is required on every scheduling route
    calendar: Calendar,
) -> HolidaysResponse:
    """Holidays used for business-day adjustment in ``year``."""
    return HolidaysResponse(
        year=year,
        covered=calendar.covers(year),
        holidays=[HolidayOut.from_domain(holiday) for holiday in calendar.holidays(year)],
    )
