import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Union

from cally.availability import slots_for_date, summarize_day
from cally.booking import BookingEngine
from cally.calendar_grid import YearMonth, cells_for_month, next_month, pad_to_weeks, previous_month
from cally.config.settings import Settings, settings as default_settings
from cally.dates import require_date
from cally.errors import SchedulingError
from cally.filters import ALL_SERVICES, filter_and_group
from cally.models.appointment import BookingRequest
from cally.models.results import BookingResult, Failure, QueryResult
from cally.models.views import AgendaView, CalendarCell, TimeSlot
from cally.store import AppointmentStore

logger = logging.getLogger(__name__)


class SchedulingService:
    """
    Request/response surface of the scheduling engine.

    Every query reads one snapshot of the store. "now" comes from the
    injected clock unless a call passes its own reference. Failures come
    back as typed results, never as exceptions.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[AppointmentStore] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.settings = settings or default_settings
        self.clock = clock or datetime.now
        self.booking = BookingEngine(self.settings, store, clock=self.clock)

    @property
    def store(self) -> AppointmentStore:
        return self.booking.store

    def commit(self, request: Union[BookingRequest, Mapping[str, Any]]) -> BookingResult:
        return self.booking.commit(request)

    def cancel(self, appointment_id: str) -> BookingResult:
        return self.booking.cancel(appointment_id)

    def slots_for_date(self, target_date: Any) -> QueryResult[List[TimeSlot]]:
        try:
            slots = slots_for_date(target_date, self.settings.slot_template, self.store.snapshot())
            summary = summarize_day(target_date, slots)
        except SchedulingError as e:
            return self._failed(e)

        if summary.available:
            message = f"{summary.available} of {summary.total} slots available on {summary.date.isoformat()}"
        else:
            message = f"Fully booked on {summary.date.isoformat()}"
        return QueryResult(status="ok", message=message, data=slots)

    def cells_for_month(
        self,
        year_month: Any = None,
        padded: bool = False,
        now: Any = None
    ) -> QueryResult[List[CalendarCell]]:
        """
        Month grid for a reference month.

        Args:
            year_month: month reference; defaults to the month of "now"
            padded: extend with adjacent-month days to fill whole weeks
            now: overrides the clock for the is_today flag
        """
        reference = self._now(now)
        try:
            month = YearMonth.parse(require_date(reference) if year_month is None else year_month)
            appointments = self.store.snapshot()
            cells = cells_for_month(month, reference, appointments, self.settings.cell_preview_limit)
            if padded:
                cells = pad_to_weeks(
                    cells,
                    reference,
                    appointments,
                    self.settings.cell_preview_limit,
                    self.settings.first_weekday,
                )
        except SchedulingError as e:
            return self._failed(e)

        booked = sum(cell.appointment_count for cell in cells if cell.is_current_month)
        return QueryResult(status="ok", message=f"{month}: {booked} appointments", data=cells)

    def next_month(self, year_month: Any) -> QueryResult[YearMonth]:
        try:
            month = next_month(year_month)
        except SchedulingError as e:
            return self._failed(e)
        return QueryResult(status="ok", message=str(month), data=month)

    def previous_month(self, year_month: Any) -> QueryResult[YearMonth]:
        try:
            month = previous_month(year_month)
        except SchedulingError as e:
            return self._failed(e)
        return QueryResult(status="ok", message=str(month), data=month)

    def filter_and_group(
        self,
        service_type: str = ALL_SERVICES,
        query: Optional[str] = "",
        now: Any = None
    ) -> QueryResult[AgendaView]:
        try:
            view = filter_and_group(
                self.store.snapshot(),
                service_type=service_type,
                query=query,
                now=self._now(now),
                service_types=self.settings.service_types,
            )
        except SchedulingError as e:
            return self._failed(e)

        upcoming = len(view.upcoming)
        return QueryResult(
            status="ok",
            message=f"{len(view.today)} today, {upcoming} upcoming",
            data=view,
        )

    def _now(self, now: Any) -> Any:
        return self.clock() if now is None else now

    def _failed(self, error: SchedulingError) -> QueryResult:
        logger.warning(f"Query rejected ({error.kind.value}): {error.message}")
        return QueryResult(status="failed", message=error.message, error=Failure.from_error(error))
