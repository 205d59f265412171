import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from cally.availability import available_times, slots_for_date
from cally.config.settings import Settings
from cally.dates import minute_of_day, to_local_date
from cally.errors import SchedulingError, SlotConflict, ValidationError
from cally.models.appointment import Appointment, BookingRequest
from cally.models.results import BookingResult, Failure
from cally.store import AppointmentStore

logger = logging.getLogger(__name__)


class BookingEngine:
    """Validates and commits bookings. Owns the appointment store."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[AppointmentStore] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.settings = settings
        self.store = store if store is not None else AppointmentStore()
        self.clock = clock

    def commit(self, request: Union[BookingRequest, Mapping[str, Any]]) -> BookingResult:
        """
        Book a slot if it is free.

        Args:
            request: BookingRequest or a mapping with date, time, serviceType,
                serviceName and optional notes, clientName, location

        Returns:
            BookingResult with status "booked" and the appointment, or status
            "failed" with a ValidationError / SlotConflict failure. A failed
            commit leaves the store untouched.
        """
        try:
            fields = self._validate(request)

            with self.store.lock:
                occupant = self.store.find_slot(fields["date"], fields["time"])
                if occupant is not None:
                    free = available_times(
                        slots_for_date(fields["date"], self.settings.slot_template, self.store.snapshot())
                    )
                    raise SlotConflict(
                        f"{fields['time']} on {fields['date'].isoformat()} is already booked.",
                        alternatives=free,
                    )

                appointment = Appointment(id=self._new_id(), created_at=self.clock(), **fields)
                self.store.insert(appointment)

        except SchedulingError as e:
            logger.warning(f"Booking rejected ({e.kind.value}): {e.message}")
            return BookingResult(
                status="failed",
                message=e.message,
                error=Failure.from_error(e),
                alternatives=getattr(e, "alternatives", []),
            )

        logger.info(
            f"Appointment booked: {appointment.id} - {appointment.service_name} "
            f"on {appointment.date.isoformat()} at {appointment.time}"
        )
        return BookingResult(
            status="booked",
            message=(
                f"Your appointment is confirmed for {appointment.service_name} "
                f"on {appointment.date.isoformat()} at {appointment.time}."
            ),
            appointment=appointment,
        )

    def cancel(self, appointment_id: str) -> BookingResult:
        """Remove an appointment by id. Fails with NotFound if it does not exist."""
        try:
            with self.store.lock:
                removed = self.store.remove(appointment_id)
        except SchedulingError as e:
            logger.warning(f"Cancel rejected ({e.kind.value}): {e.message}")
            return BookingResult(status="failed", message=e.message, error=Failure.from_error(e))

        logger.info(f"Appointment cancelled: {removed.id}")
        return BookingResult(
            status="cancelled",
            message=f"Appointment {removed.id} on {removed.date.isoformat()} at {removed.time} was cancelled.",
            appointment=removed,
        )

    def _validate(self, request: Union[BookingRequest, Mapping[str, Any]]) -> Dict[str, Any]:
        if isinstance(request, BookingRequest):
            payload = request
        elif isinstance(request, Mapping):
            try:
                payload = BookingRequest.model_validate(dict(request))
            except PydanticValidationError as e:
                raise ValidationError(
                    "Booking request is invalid.",
                    details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
                ) from e
        else:
            raise ValidationError("Booking request must be a mapping of fields.")

        problems = [f"{name} is required" for name in payload.missing_fields()]

        booking_date: Optional[date] = None
        if payload.date is not None and "date" not in payload.missing_fields():
            try:
                booking_date = to_local_date(payload.date)
            except ValueError:
                problems.append(f"date {payload.date!r} is not a valid calendar date")

        slot_label = None
        if payload.time:
            slot_label = self._template_label(payload.time)
            if slot_label is None:
                if minute_of_day(payload.time) is None:
                    problems.append(f"time {payload.time!r} is not a valid time")
                else:
                    problems.append(
                        f"time {payload.time} is outside our business hours. "
                        f"Available times: {', '.join(self.settings.slot_template)}"
                    )

        if payload.service_type and payload.service_type not in self.settings.service_types:
            problems.append(
                f"serviceType {payload.service_type!r} is not offered. "
                f"Choose one of: {', '.join(self.settings.service_types)}"
            )

        if problems:
            raise ValidationError("Booking request is invalid.", details=problems)

        return {
            "date": booking_date,
            "time": slot_label,
            "service_type": payload.service_type,
            "service_name": payload.service_name,
            "location": payload.location,
            "client_name": payload.client_name,
            "notes": payload.notes,
        }

    def _template_label(self, label: str) -> Optional[str]:
        """The slot template's own spelling of a time, if the time is bookable."""
        minutes = minute_of_day(label)
        if minutes is None:
            return None
        for slot in self.settings.slot_template:
            if minute_of_day(slot) == minutes:
                return slot
        return None

    def _new_id(self) -> str:
        # Called with the store lock held.
        while True:
            appointment_id = f"apt_{uuid4().hex[:12]}"
            if appointment_id not in self.store:
                return appointment_id
