"""
Month calendar cells.

The core sequence covers the days of one month only. pad_to_weeks extends
it with adjacent-month days so a caller can lay it out in full weeks.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, List

from cally.availability import AvailabilityIndex, sorted_by_time
from cally.dates import require_date
from cally.errors import InvalidArgument
from cally.models.appointment import Appointment
from cally.models.views import CalendarCell

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


@dataclass(frozen=True, order=True)
class YearMonth:
    year: int
    month: int

    def __post_init__(self):
        if isinstance(self.year, bool) or not isinstance(self.year, int) or not 1 <= self.year <= 9999:
            raise InvalidArgument(f"Invalid year: {self.year!r}")
        if isinstance(self.month, bool) or not isinstance(self.month, int) or not 1 <= self.month <= 12:
            raise InvalidArgument(f"Invalid month: {self.month!r}")

    @classmethod
    def parse(cls, value: Any) -> "YearMonth":
        """Accepts YearMonth, 'YYYY-MM', (year, month) or any date/datetime."""
        if isinstance(value, YearMonth):
            return value
        if isinstance(value, date):
            return cls(value.year, value.month)
        if isinstance(value, str):
            match = _YEAR_MONTH_RE.match(value.strip())
            if not match:
                raise InvalidArgument(f"Invalid month reference: {value!r}. Expected YYYY-MM")
            return cls(int(match.group(1)), int(match.group(2)))
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(value[0], value[1])
        raise InvalidArgument(f"Invalid month reference: {value!r}")

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def days(self) -> List[date]:
        return [self.first_day + timedelta(days=i) for i in range(self.last_day.day)]

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def next_month(year_month: Any) -> YearMonth:
    current = YearMonth.parse(year_month)
    if current.month == 12:
        return YearMonth(current.year + 1, 1)
    return YearMonth(current.year, current.month + 1)


def previous_month(year_month: Any) -> YearMonth:
    current = YearMonth.parse(year_month)
    if current.month == 1:
        return YearMonth(current.year - 1, 12)
    return YearMonth(current.year, current.month - 1)


def _make_cell(
    day: date,
    in_month: bool,
    today: date,
    index: AvailabilityIndex,
    preview_limit: int
) -> CalendarCell:
    day_appointments = sorted_by_time(index.appointments_for(day))
    preview = day_appointments[:preview_limit]
    return CalendarCell(
        date=day,
        is_current_month=in_month,
        is_today=day == today,
        appointment_count=len(day_appointments),
        preview=preview,
        overflow_count=len(day_appointments) - len(preview),
    )


def cells_for_month(
    year_month: Any,
    now: Any,
    appointments: Iterable[Appointment] = (),
    preview_limit: int = 3
) -> List[CalendarCell]:
    """
    Build one cell per day of the month, first to last.

    Args:
        year_month: month reference (see YearMonth.parse)
        now: injected reference for the is_today flag
        appointments: appointments to count per day
        preview_limit: how many of a day's appointments to carry in the cell

    Returns:
        list[CalendarCell] in ascending date order, all in the current month
    """
    month = YearMonth.parse(year_month)
    if preview_limit < 0:
        raise InvalidArgument("preview_limit must be >= 0")
    today = require_date(now)
    index = AvailabilityIndex(appointments)
    return [_make_cell(day, True, today, index, preview_limit) for day in month.days()]


def pad_to_weeks(
    cells: List[CalendarCell],
    now: Any,
    appointments: Iterable[Appointment] = (),
    preview_limit: int = 3,
    first_weekday: int = calendar.SUNDAY
) -> List[CalendarCell]:
    """Extend a month's cells with adjacent-month days to fill whole weeks."""
    if not cells:
        return []
    if not 0 <= first_weekday <= 6:
        raise InvalidArgument(f"Invalid first weekday: {first_weekday!r}")

    today = require_date(now)
    index = AvailabilityIndex(appointments)
    first = cells[0].date
    last = cells[-1].date
    last_weekday = (first_weekday + 6) % 7

    leading = (first.weekday() - first_weekday) % 7
    trailing = (last_weekday - last.weekday()) % 7

    try:
        before = [
            _make_cell(first - timedelta(days=n), False, today, index, preview_limit)
            for n in range(leading, 0, -1)
        ]
        after = [
            _make_cell(last + timedelta(days=n), False, today, index, preview_limit)
            for n in range(1, trailing + 1)
        ]
    except OverflowError as e:
        raise InvalidArgument(f"Cannot pad {first:%Y-%m} past the supported date range") from e
    return before + list(cells) + after
