import argparse
import json
import logging
from datetime import datetime, time
from typing import List, Optional

from dotenv import load_dotenv

from cally.config.settings import Settings
from cally.dates import to_local_date
from cally.engine import SchedulingService
from cally.errors import InvalidArgument
from cally.models.results import BookingResult, QueryResult
from cally.models.views import CalendarCell
from cally.store import AppointmentStore

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cally", description="Cally Appointments: calendar, availability and booking")
    parser.add_argument("--data", help="JSON file with appointment records to start from")
    parser.add_argument("--today", help="Reference date for 'today' (YYYY-MM-DD)")
    sub = parser.add_subparsers(dest="command", required=True)

    month = sub.add_parser("month", help="Show a month's calendar cells")
    month.add_argument("year_month", nargs="?", help="YYYY-MM, defaults to the current month")
    month.add_argument("--pad", action="store_true", help="Fill whole weeks with adjacent-month days")

    day = sub.add_parser("day", help="Show the time slots of a day")
    day.add_argument("date")

    agenda = sub.add_parser("agenda", help="Show today's and upcoming appointments")
    agenda.add_argument("--service", default="all", help="Service type filter")
    agenda.add_argument("--search", default="", help="Search service, client and location")

    book = sub.add_parser("book", help="Book an appointment")
    book.add_argument("date")
    book.add_argument("time")
    book.add_argument("service_type")
    book.add_argument("service_name")
    book.add_argument("--client")
    book.add_argument("--location")
    book.add_argument("--notes")

    cancel = sub.add_parser("cancel", help="Cancel an appointment by id")
    cancel.add_argument("appointment_id")
    return parser


def _load_store(path: Optional[str]) -> AppointmentStore:
    if not path:
        return AppointmentStore()
    try:
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InvalidArgument(f"Cannot read {path}: {e}") from e
    if isinstance(records, dict):
        records = records.get("appointments", [])
    return AppointmentStore.from_records(records)


def _format_cell(cell: CalendarCell) -> str:
    marker = "*" if cell.is_today else " "
    line = f"{cell.date.isoformat()} {cell.date:%a}{marker}"
    if not cell.is_current_month:
        line += " (adjacent)"
    if cell.appointment_count:
        shown = ", ".join(f"{a.time} {a.service_name}" for a in cell.preview)
        line += f"  {shown}"
        if cell.overflow_count:
            line += f" +{cell.overflow_count} more"
    return line


def _print_failure(result) -> int:
    print(f"Error: {result.message}")
    for detail in result.error.details:
        print(f"  - {detail}")
    for alternative in getattr(result, "alternatives", []):
        print(f"  • {alternative} is available")
    return 1


def _run(service: SchedulingService, args: argparse.Namespace) -> int:
    if args.command == "month":
        result: QueryResult = service.cells_for_month(args.year_month, padded=args.pad)
        if not result.ok:
            return _print_failure(result)
        print(result.message)
        for cell in result.data:
            print(_format_cell(cell))
        return 0

    if args.command == "day":
        result = service.slots_for_date(args.date)
        if not result.ok:
            return _print_failure(result)
        print(result.message)
        for slot in result.data:
            status = "available" if slot.is_available else f"booked ({slot.service_name})"
            print(f"• {slot.time:<9} {status}")
        return 0

    if args.command == "agenda":
        result = service.filter_and_group(args.service, args.search)
        if not result.ok:
            return _print_failure(result)
        print(result.message)
        print("Today:")
        for a in result.data.today:
            print(f"  {a.time:<9} {a.service_name} [{a.service_type}]")
        for group in result.data.upcoming_groups:
            print(f"{group.date:%A, %B %d}:")
            for a in group.appointments:
                print(f"  {a.time:<9} {a.service_name} [{a.service_type}]")
        return 0

    if args.command == "book":
        booking: BookingResult = service.commit({
            "date": args.date,
            "time": args.time,
            "serviceType": args.service_type,
            "serviceName": args.service_name,
            "clientName": args.client,
            "location": args.location,
            "notes": args.notes,
        })
        if not booking.ok:
            return _print_failure(booking)
        print(booking.message)
        print(f"Confirmation number: {booking.appointment.id}")
        return 0

    booking = service.cancel(args.appointment_id)
    if not booking.ok:
        return _print_failure(booking)
    print(booking.message)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = _build_parser().parse_args(argv)

    settings = Settings()
    _setup_logging(settings.log_level)

    clock = datetime.now
    if args.today:
        try:
            today = to_local_date(args.today)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        clock = lambda: datetime.combine(today, time(12, 0))

    try:
        store = _load_store(args.data)
    except InvalidArgument as e:
        logger.error(f"Failed to load appointments from {args.data}: {e.message}")
        print(f"Error: {e.message}")
        for detail in e.details:
            print(f"  - {detail}")
        return 1

    service = SchedulingService(settings=settings, store=store, clock=clock)
    return _run(service, args)


if __name__ == "__main__":
    raise SystemExit(main())
