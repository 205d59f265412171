"""
Derived appointment views for display collaborators.

filter_and_group applies the service-type filter, the text search and the
(date, time) sort in that order, then splits the result into today and
upcoming date groups relative to the injected "now". Past days are left out.
"""

from itertools import groupby
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from cally.dates import require_date, time_sort_key
from cally.errors import InvalidArgument
from cally.models.appointment import Appointment
from cally.models.views import AgendaView, DayGroup

ALL_SERVICES = "all"

SEARCH_FIELDS = ("service_name", "client_name", "location")


def filter_by_service_type(appointments: Iterable[Appointment], service_type: str) -> List[Appointment]:
    wanted = (service_type or ALL_SERVICES).strip().lower()
    if wanted == ALL_SERVICES:
        return list(appointments)
    return [a for a in appointments if a.service_type == wanted]


def matches_query(appointment: Appointment, query: str) -> bool:
    needle = query.lower()
    for field_name in SEARCH_FIELDS:
        value = getattr(appointment, field_name)
        if value and needle in value.lower():
            return True
    return False


def search(appointments: Iterable[Appointment], query: Optional[str]) -> List[Appointment]:
    """Case-insensitive substring search over service name, client name and location."""
    if not query or not query.strip():
        return list(appointments)
    return [a for a in appointments if matches_query(a, query)]


def appointment_sort_key(appointment: Appointment) -> Tuple:
    return (appointment.date, time_sort_key(appointment.time), appointment.id)


def sort_appointments(appointments: Iterable[Appointment]) -> List[Appointment]:
    return sorted(appointments, key=appointment_sort_key)


def bucket_by_day(appointments: Iterable[Appointment], now: Any) -> Tuple[List[Appointment], List[Appointment]]:
    """Split into (today, upcoming). Appointments before today are dropped."""
    today = require_date(now)
    todays = []
    upcoming = []
    for appointment in appointments:
        if appointment.date == today:
            todays.append(appointment)
        elif appointment.date > today:
            upcoming.append(appointment)
    return todays, upcoming


def group_by_date(appointments: Iterable[Appointment]) -> List[DayGroup]:
    """Contiguous same-date runs, in the order given."""
    return [
        DayGroup(date=day, appointments=list(run))
        for day, run in groupby(appointments, key=lambda a: a.date)
    ]


def filter_and_group(
    appointments: Iterable[Appointment],
    service_type: str = ALL_SERVICES,
    query: Optional[str] = "",
    now: Any = None,
    service_types: Optional[Sequence[str]] = None
) -> AgendaView:
    """
    Build the today / upcoming agenda.

    Args:
        appointments: current appointment set
        service_type: a declared service type, or "all"
        query: free-text search; empty means no search
        now: injected reference for "today"
        service_types: declared service types; when given, unknown filter
            values are rejected

    Returns:
        AgendaView with today's appointments and upcoming DayGroups, both
        sorted by (date, time)
    """
    if now is None:
        raise InvalidArgument("A reference date for 'today' is required")
    wanted = (service_type or ALL_SERVICES).strip().lower()
    if service_types is not None and wanted != ALL_SERVICES and wanted not in service_types:
        raise InvalidArgument(
            f"Unknown service type {service_type!r}. Choose 'all' or one of: {', '.join(service_types)}"
        )

    selected = filter_by_service_type(appointments, wanted)
    selected = search(selected, query)
    selected = sort_appointments(selected)

    todays, upcoming = bucket_by_day(selected, now)
    return AgendaView(today=todays, upcoming_groups=group_by_date(upcoming))
