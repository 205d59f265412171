from __future__ import annotations

from datetime import date, datetime

import pytest

from cally.errors import InvalidArgument
from cally.filters import (
    bucket_by_day,
    filter_and_group,
    filter_by_service_type,
    group_by_date,
    search,
    sort_appointments,
)
from cally.models.appointment import Appointment

NOW = datetime(2024, 5, 10, 15, 0)


def _appt(appointment_id: str, day: date, time: str, service_type: str = "haircut", **extra: str) -> Appointment:
    extra.setdefault("service_name", "Haircut & Styling")
    return Appointment(id=appointment_id, date=day, time=time, service_type=service_type, **extra)


@pytest.fixture
def appointments() -> list[Appointment]:
    return [
        _appt("past", date(2024, 5, 9), "10:00 AM"),
        _appt("today-late", date(2024, 5, 10), "4:00 PM", "spa", service_name="Swedish Massage", location="Tranquil Spa"),
        _appt("today-early", date(2024, 5, 10), "9:00 AM", client_name="Taylor Reed"),
        _appt("d1-b", date(2024, 5, 11), "2:30 PM", "dental", service_name="Dental Checkup",
              location="Smile Dental Clinic", client_name="Morgan Smith"),
        _appt("d2", date(2024, 5, 13), "9:15 AM", "medical", service_name="Medical Consultation", location="Health Center"),
        _appt("d1-a", date(2024, 5, 11), "10:00 AM", "fitness", service_name="Personal Training", location="FitLife Gym"),
    ]


def test_all_and_empty_search_return_every_non_past_appointment_once(appointments: list[Appointment]) -> None:
    view = filter_and_group(appointments, "all", "", now=NOW)

    assert [a.id for a in view.today] == ["today-early", "today-late"]
    assert [a.id for a in view.upcoming] == ["d1-a", "d1-b", "d2"]
    seen = [a.id for a in view.today] + [a.id for a in view.upcoming]
    assert sorted(seen) == sorted(a.id for a in appointments if a.id != "past")


def test_upcoming_groups_follow_date_runs(appointments: list[Appointment]) -> None:
    view = filter_and_group(appointments, now=NOW)

    assert [g.date for g in view.upcoming_groups] == [date(2024, 5, 11), date(2024, 5, 13)]
    assert [[a.id for a in g.appointments] for g in view.upcoming_groups] == [["d1-a", "d1-b"], ["d2"]]


def test_group_by_date_on_d1_d1_d2() -> None:
    a = _appt("a", date(2024, 6, 1), "09:00 AM")
    b = _appt("b", date(2024, 6, 1), "10:00 AM")
    c = _appt("c", date(2024, 6, 2), "09:00 AM")

    groups = group_by_date([a, b, c])

    assert len(groups) == 2
    assert groups[0].date == date(2024, 6, 1) and groups[0].appointments == [a, b]
    assert groups[1].date == date(2024, 6, 2) and groups[1].appointments == [c]


def test_service_type_filter(appointments: list[Appointment]) -> None:
    assert [a.id for a in filter_by_service_type(appointments, "dental")] == ["d1-b"]
    assert len(filter_by_service_type(appointments, "ALL")) == len(appointments)

    view = filter_and_group(appointments, "haircut", now=NOW)
    assert [a.id for a in view.today] == ["today-early"]
    assert view.upcoming_groups == []


def test_search_matches_any_of_the_three_fields(appointments: list[Appointment]) -> None:
    found = search(appointments, "dental")
    assert [a.id for a in found] == ["d1-b"]

    by_name = _appt("x", date(2024, 6, 1), "09:00 AM", "dental", service_name="Dental Checkup")
    by_location = _appt("y", date(2024, 6, 2), "09:00 AM", "dental", service_name="Cleaning", location="Smile Dental Clinic")
    assert [a.id for a in search([by_name, by_location], "dental")] == ["x", "y"]


def test_search_is_case_insensitive_and_tolerates_missing_fields(appointments: list[Appointment]) -> None:
    assert [a.id for a in search(appointments, "TAYLOR")] == ["today-early"]
    assert [a.id for a in search(appointments, "gym")] == ["d1-a"]
    assert search(appointments, "nobody") == []


def test_blank_search_is_no_search(appointments: list[Appointment]) -> None:
    assert search(appointments, "   ") == appointments
    assert search(appointments, None) == appointments


def test_sort_by_date_then_clock_time() -> None:
    a = _appt("a", date(2024, 6, 1), "1:00 PM")
    b = _appt("b", date(2024, 6, 1), "09:00 AM")
    c = _appt("c", date(2024, 5, 31), "5:00 PM")

    assert [x.id for x in sort_appointments([a, b, c])] == ["c", "b", "a"]


def test_bucket_by_day_drops_the_past(appointments: list[Appointment]) -> None:
    todays, upcoming = bucket_by_day(appointments, date(2024, 5, 10))
    assert {a.id for a in todays} == {"today-late", "today-early"}
    assert "past" not in {a.id for a in upcoming}


def test_filters_compose_before_grouping(appointments: list[Appointment]) -> None:
    view = filter_and_group(appointments, "dental", "smile", now=NOW)
    assert view.today == []
    assert [a.id for a in view.upcoming] == ["d1-b"]


def test_unknown_service_type_is_rejected_when_types_are_declared(appointments: list[Appointment]) -> None:
    with pytest.raises(InvalidArgument):
        filter_and_group(appointments, "tattoo", now=NOW, service_types=["haircut", "spa"])


def test_reference_date_is_required(appointments: list[Appointment]) -> None:
    with pytest.raises(InvalidArgument):
        filter_and_group(appointments)
