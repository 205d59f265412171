from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from cally.dates import require_date, same_time, time_sort_key
from cally.errors import InvalidArgument
from cally.models.appointment import Appointment
from cally.models.views import DaySummary, TimeSlot


def _require_label(label: Any) -> str:
    if not isinstance(label, str) or not label.strip():
        raise InvalidArgument(f"Invalid time label: {label!r}")
    return label


class AvailabilityIndex:
    """Maps calendar days to the appointments occupying them."""

    def __init__(self, appointments: Iterable[Appointment]):
        self._by_date: Dict[date, List[Appointment]] = defaultdict(list)
        for appointment in appointments:
            self._by_date[appointment.date].append(appointment)

    def appointments_for(self, target_date: Any) -> List[Appointment]:
        """All appointments on the given local day, in insertion order."""
        day = require_date(target_date)
        return list(self._by_date.get(day, []))

    def occupant(self, target_date: Any, time_label: str) -> Optional[Appointment]:
        time_label = _require_label(time_label)
        for appointment in self._by_date.get(require_date(target_date), []):
            if same_time(appointment.time, time_label):
                return appointment
        return None

    def slots_for(self, target_date: Any, slot_template: Sequence[str]) -> List[TimeSlot]:
        """
        Derive the day's slots from the template.

        Args:
            target_date: day to inspect (date, datetime or 'YYYY-MM-DD')
            slot_template: ordered slot labels of a business day

        Returns:
            One TimeSlot per template label, in template order. A slot is
            unavailable iff an appointment on that day holds the same label.
        """
        day = require_date(target_date)
        labels = [_require_label(label) for label in slot_template]
        day_appointments = self._by_date.get(day, [])

        slots = []
        for label in labels:
            taken = next((a for a in day_appointments if same_time(a.time, label)), None)
            if taken is None:
                slots.append(TimeSlot(time=label, is_available=True))
            else:
                slots.append(TimeSlot(
                    time=label,
                    is_available=False,
                    service_type=taken.service_type,
                    service_name=taken.service_name,
                    appointment_id=taken.id,
                ))
        return slots

    def count_for(self, target_date: Any) -> int:
        return len(self._by_date.get(require_date(target_date), []))


def appointments_for_date(target_date: Any, appointments: Iterable[Appointment]) -> List[Appointment]:
    return AvailabilityIndex(appointments).appointments_for(target_date)


def find_occupant(target_date: Any, time_label: str, appointments: Iterable[Appointment]) -> Optional[Appointment]:
    """The appointment holding a date/time slot, if any."""
    return AvailabilityIndex(appointments).occupant(target_date, time_label)


def slots_for_date(
    target_date: Any,
    slot_template: Sequence[str],
    appointments: Iterable[Appointment]
) -> List[TimeSlot]:
    return AvailabilityIndex(appointments).slots_for(target_date, slot_template)


def available_times(slots: Iterable[TimeSlot]) -> List[str]:
    return [slot.time for slot in slots if slot.is_available]


def summarize_day(target_date: Any, slots: Sequence[TimeSlot]) -> DaySummary:
    available = len(available_times(slots))
    return DaySummary(
        date=require_date(target_date),
        total=len(slots),
        available=available,
        booked=len(slots) - available,
    )


def sorted_by_time(appointments: Iterable[Appointment]) -> List[Appointment]:
    return sorted(appointments, key=lambda a: (time_sort_key(a.time), a.id))
