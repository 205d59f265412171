"""
Local-day and slot-label helpers.

Dates are compared by calendar day only. A datetime contributes its own
date component; no timezone conversion is ever applied. Time labels such as
"9:00 AM", "09:00 AM" and "09:00" are compared by minute of day.
"""

from datetime import date, datetime, time
from typing import Any, Optional, Tuple

from cally.errors import InvalidArgument

TIME_FORMATS = ("%I:%M %p", "%I:%M%p", "%H:%M")
MINUTES_PER_DAY = 24 * 60


def to_local_date(value: Any) -> date:
    """
    Reduce a date-like value to its calendar day.

    Args:
        value: date, datetime (aware or naive) or ISO 8601 string

    Returns:
        datetime.date

    Raises:
        ValueError: if the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}") from None
    raise ValueError(f"Invalid date: {value!r}")


def require_date(value: Any) -> date:
    """Like to_local_date, but fails with InvalidArgument for query callers."""
    try:
        return to_local_date(value)
    except ValueError as e:
        raise InvalidArgument(str(e)) from e


def parse_time_label(label: str) -> time:
    if not isinstance(label, str):
        raise ValueError(f"Invalid time label: {label!r}")
    text = label.strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time label: {label!r}")


def minute_of_day(label: str) -> Optional[int]:
    """Minutes since midnight for a label, or None if it is not a time."""
    try:
        parsed = parse_time_label(label)
    except ValueError:
        return None
    return parsed.hour * 60 + parsed.minute


def same_time(a: str, b: str) -> bool:
    a_minutes = minute_of_day(a)
    b_minutes = minute_of_day(b)
    if a_minutes is None or b_minutes is None:
        return a.strip().upper() == b.strip().upper()
    return a_minutes == b_minutes


def time_sort_key(label: str) -> Tuple[int, str]:
    # Unparseable labels sort after every real time of day.
    minutes = minute_of_day(label)
    return (MINUTES_PER_DAY if minutes is None else minutes, label.strip().upper())
