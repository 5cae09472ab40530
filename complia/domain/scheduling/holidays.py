"""Holiday calendar and business-day adjustment.

The calendar reads holidays from a ``HolidaySource``. The default source is a
fixed-date table precomputed for a window of years around the current one;
years outside the window simply have no holidays, so adjustment there only
skips weekends.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Final, Protocol

from complia.core.exceptions import InternalComputationError

if TYPE_CHECKING:
    from complia.core.config import SchedulingConfig

SATURDAY: Final[int] = 5


@dataclass(frozen=True, slots=True)
class Holiday:
    """A non-working day."""

    date: date
    name: str
    is_national: bool


# (month, day, name, is_national)
FIXED_HOLIDAYS: Final[tuple[tuple[int, int, str, bool], ...]] = (
    (1, 26, "Republic Day", True),
    (3, 8, "Holi", False),
    (4, 14, "Ram Navami", False),
    (8, 15, "Independence Day", True),
    (8, 19, "Janmashtami", False),
    (10, 2, "Gandhi Jayanti", True),
    (10, 24, "Dussehra", False),
    (11, 12, "Diwali", False),
    (12, 25, "Christmas", True),
)


class HolidaySource(Protocol):
    """Anything that can list holidays for a year."""

    def holidays_for(self, year: int) -> Sequence[Holiday]: ...

    def covers(self, year: int) -> bool: ...


class StaticHolidaySource:
    """Fixed-date holiday table for an inclusive range of years."""

    def __init__(
        self,
        first_year: int,
        last_year: int,
        entries: Iterable[tuple[int, int, str, bool]] = FIXED_HOLIDAYS,
    ) -> None:
        if last_year < first_year:
            raise ValueError(
                f"Holiday window is empty: {first_year} > {last_year}"
            )
        self.first_year = first_year
        self.last_year = last_year
        entries = tuple(entries)
        self._table: dict[int, tuple[Holiday, ...]] = {
            year: tuple(
                sorted(
                    (
                        Holiday(date(year, month, day), name, national)
                        for month, day, name, national in entries
                    ),
                    key=lambda holiday: holiday.date,
                )
            )
            for year in range(first_year, last_year + 1)
        }

    @classmethod
    def around(
        cls, current_year: int, years_before: int, years_after: int
    ) -> "StaticHolidaySource":
        """Build a table for ``current_year - years_before .. current_year + years_after``."""
        return cls(current_year - years_before, current_year + years_after)

    def covers(self, year: int) -> bool:
        return year in self._table

    def holidays_for(self, year: int) -> tuple[Holiday, ...]:
        return self._table.get(year, ())


class HolidayCalendar:
    """Answers holiday questions and rolls dates forward to business days.

    Args:
        source: Where holidays come from.
        max_adjustment_days: Upper bound on how far ``next_business_day`` may
            move a date before giving up.
    """

    def __init__(self, source: HolidaySource, max_adjustment_days: int = 31) -> None:
        self._source = source
        self.max_adjustment_days = max_adjustment_days

    def holidays(self, year: int) -> list[Holiday]:
        return list(self._source.holidays_for(year))

    def covers(self, year: int) -> bool:
        return self._source.covers(year)

    def is_holiday(self, day: date) -> bool:
        return any(holiday.date == day for holiday in self._source.holidays_for(day.year))

    def is_business_day(self, day: date) -> bool:
        return day.weekday() < SATURDAY and not self.is_holiday(day)

    def next_business_day(self, day: date) -> date:
        """Return ``day`` if it is a business day, else the next one after it.

        Raises:
            InternalComputationError: If no business day is found within
                ``max_adjustment_days``.
        """
        candidate = day
        for _ in range(self.max_adjustment_days + 1):
            if self.is_business_day(candidate):
                return candidate
            candidate += timedelta(days=1)
        raise InternalComputationError(
            "No business day found within adjustment bound",
            context={
                "date": day.isoformat(),
                "max_adjustment_days": self.max_adjustment_days,
            },
        )


def build_holiday_calendar(
    config: "SchedulingConfig", current_year: int | None = None
) -> HolidayCalendar:
    """Create the default calendar from scheduling settings."""
    year = current_year if current_year is not None else date.today().year
    source = StaticHolidaySource.around(
        year, config.holiday_years_before, config.holiday_years_after
    )
    return HolidayCalendar(source, max_adjustment_days=config.max_adjustment_days)
