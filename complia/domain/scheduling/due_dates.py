"""Due date calculation per periodicity.

Raw dates are computed from the periodicity and rule, then each is moved to
the next business day. Day numbers that overflow a month (31 in February)
are clamped to the month's last day.
"""

from calendar import monthrange
from datetime import date, timedelta
from typing import Final, assert_never

from loguru import logger

from complia.domain.scheduling.enums import Periodicity
from complia.domain.scheduling.holidays import HolidayCalendar
from complia.domain.scheduling.types import Compliance, DueDateRule

# (year offset, month) pairs
QUARTERLY_SLOTS: Final[tuple[tuple[int, int], ...]] = ((0, 4), (0, 7), (0, 10), (1, 4))
HALF_YEARLY_SLOTS: Final[tuple[tuple[int, int], ...]] = ((0, 10), (1, 4))
WEEKDAY_LIMIT: Final[int] = 5


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping ``day`` to the last day of the month."""
    return date(year, month, min(day, monthrange(year, month)[1]))


def _weekly(year: int, weekday: int) -> list[date]:
    first = date(year, 1, 1)
    current = first + timedelta(days=(weekday - first.weekday()) % 7)
    dates = []
    while current.year == year:
        dates.append(current)
        current += timedelta(days=7)
    return dates


def _weekdays(year: int) -> list[date]:
    current = date(year, 1, 1)
    dates = []
    while current.year == year:
        if current.weekday() < WEEKDAY_LIMIT:
            dates.append(current)
        current += timedelta(days=1)
    return dates


def raw_due_dates(periodicity: Periodicity, rule: DueDateRule, year: int) -> list[date]:
    """Unadjusted due dates for one periodicity in ``year``."""
    match periodicity:
        case Periodicity.MONTHLY:
            return [clamped_date(year, month, rule.day) for month in range(1, 13)]
        case Periodicity.QUARTERLY:
            return [
                clamped_date(year + offset, month, rule.day)
                for offset, month in QUARTERLY_SLOTS
            ]
        case Periodicity.HALF_YEARLY:
            return [
                clamped_date(year + offset, month, rule.day)
                for offset, month in HALF_YEARLY_SLOTS
            ]
        case Periodicity.YEARLY:
            return [clamped_date(year, rule.month, rule.day)]
        case Periodicity.WEEKLY:
            return _weekly(year, rule.weekday)
        case Periodicity.DAILY:
            return _weekdays(year)
        case Periodicity.ONE_TIME:
            specific = rule.specific_date
            return [specific] if specific is not None and specific.year == year else []
        case Periodicity.EVENT_BASED:
            return []
        case _:
            assert_never(periodicity)


class DueDateCalculator:
    """Computes business-day due dates for a compliance in a year."""

    def __init__(self, calendar: HolidayCalendar) -> None:
        self.calendar = calendar

    def calculate_due_dates(self, compliance: Compliance, year: int) -> list[date]:
        """Return the ordered, adjusted due dates for ``year``.

        Never raises: an unknown periodicity, a malformed rule or an
        arithmetic failure is logged and produces an empty list.
        """
        periodicity = Periodicity.parse(compliance.periodicity)
        if periodicity is None:
            logger.warning(
                "Unknown periodicity {}, no due dates scheduled",
                compliance.periodicity,
                compliance_id=compliance.id,
            )
            return []
        # Event-based obligations are created by hand, whatever the rule says
        if periodicity is Periodicity.EVENT_BASED:
            return []

        try:
            rule = DueDateRule.parse(compliance.due_date_rule)
            adjusted = [
                self.calendar.next_business_day(raw)
                for raw in raw_due_dates(periodicity, rule, year)
            ]
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Error calculating due dates: {}",
                exc,
                compliance_id=compliance.id,
                year=year,
                error_type=type(exc).__name__,
            )
            return []

        # Adjustment can roll two raw dates onto the same business day
        return list(dict.fromkeys(adjusted))
