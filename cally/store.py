import logging
from threading import RLock
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from cally.availability import find_occupant
from cally.errors import InvalidArgument, NotFound
from cally.models.appointment import Appointment

logger = logging.getLogger(__name__)


class AppointmentStore:
    """
    Single source of truth for committed appointments.

    Writers hold `lock` for the whole check-then-write sequence. Readers get
    an immutable snapshot taken under the same lock.
    """

    def __init__(self, appointments: Iterable[Appointment] = ()):
        self._lock = RLock()
        self._appointments: Dict[str, Appointment] = {}
        for appointment in appointments:
            self._load_one(appointment)

    @property
    def lock(self) -> RLock:
        return self._lock

    def snapshot(self) -> Tuple[Appointment, ...]:
        with self._lock:
            return tuple(self._appointments.values())

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with self._lock:
            return self._appointments.get(appointment_id)

    def __contains__(self, appointment_id: object) -> bool:
        with self._lock:
            return appointment_id in self._appointments

    def __len__(self) -> int:
        with self._lock:
            return len(self._appointments)

    def find_slot(self, target_date: Any, time_label: str) -> Optional[Appointment]:
        return find_occupant(target_date, time_label, self.snapshot())

    def insert(self, appointment: Appointment) -> Appointment:
        """Add a committed appointment. Slot checks belong to the booking engine."""
        with self._lock:
            if appointment.id in self._appointments:
                raise InvalidArgument(f"Appointment id {appointment.id} already exists")
            self._appointments[appointment.id] = appointment
            return appointment

    def remove(self, appointment_id: str) -> Appointment:
        with self._lock:
            try:
                return self._appointments.pop(appointment_id)
            except KeyError:
                raise NotFound(f"Appointment {appointment_id} not found") from None

    def _load_one(self, appointment: Appointment) -> None:
        with self._lock:
            occupant = self.find_slot(appointment.date, appointment.time)
            if occupant is not None:
                raise InvalidArgument(
                    f"Appointment {appointment.id} collides with {occupant.id} "
                    f"on {appointment.date} at {appointment.time}"
                )
            self.insert(appointment)

    def export_records(self) -> List[Dict[str, Any]]:
        """Plain records in the persisted shape (camelCase keys, ISO dates)."""
        return [a.model_dump(mode="json", by_alias=True) for a in self.snapshot()]

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "AppointmentStore":
        store = cls()
        for idx, record in enumerate(records):
            try:
                appointment = Appointment.model_validate(record)
            except PydanticValidationError as e:
                raise InvalidArgument(
                    f"Record {idx} is not a valid appointment",
                    details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
                ) from e
            store._load_one(appointment)
        logger.info(f"Loaded {len(store)} appointments")
        return store
