from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from cally.dates import minute_of_day, require_date, same_time, time_sort_key, to_local_date
from cally.errors import InvalidArgument


def test_datetime_keeps_its_own_calendar_day_regardless_of_offset() -> None:
    late_evening = datetime(2024, 5, 1, 23, 30, tzinfo=timezone(timedelta(hours=-7)))
    early_morning = datetime(2024, 5, 1, 0, 5, tzinfo=timezone(timedelta(hours=9)))

    assert to_local_date(late_evening) == date(2024, 5, 1)
    assert to_local_date(early_morning) == date(2024, 5, 1)


def test_iso_strings_are_accepted() -> None:
    assert to_local_date("2024-05-01") == date(2024, 5, 1)
    assert to_local_date(" 2024-05-01T18:45:00 ") == date(2024, 5, 1)


def test_utc_suffix_keeps_the_written_day() -> None:
    assert to_local_date("2024-05-01T23:30:00Z") == date(2024, 5, 1)
    assert to_local_date("2024-05-01T00:15:00.000Z") == date(2024, 5, 1)


@pytest.mark.parametrize("value", ["", "not-a-date", "2024-02-30", 20240501, None])
def test_invalid_dates_raise_value_error(value: object) -> None:
    with pytest.raises(ValueError):
        to_local_date(value)


def test_require_date_reports_invalid_argument() -> None:
    with pytest.raises(InvalidArgument, match=r"Invalid date"):
        require_date("May 1st")


def test_time_labels_compare_by_minute_of_day() -> None:
    assert same_time("9:00 AM", "09:00 AM")
    assert same_time("09:00 AM", "09:00")
    assert same_time("2:30 pm", "14:30")
    assert not same_time("10:00 AM", "10:00 PM")


def test_midnight_and_noon() -> None:
    assert minute_of_day("12:00 AM") == 0
    assert minute_of_day("12:00 PM") == 12 * 60
    assert minute_of_day("lunchtime") is None


def test_time_sort_key_orders_by_clock_not_text() -> None:
    labels = ["1:00 PM", "09:00 AM", "12:00 PM", "whenever", "10:30"]
    assert sorted(labels, key=time_sort_key) == ["09:00 AM", "10:30", "12:00 PM", "1:00 PM", "whenever"]
