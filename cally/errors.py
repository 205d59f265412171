from enum import Enum
from typing import Iterable, List, Optional


class ErrorKind(Enum):
    """Failure categories returned to callers."""
    VALIDATION_ERROR = "validation_error"
    SLOT_CONFLICT = "slot_conflict"
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"


class SchedulingError(Exception):
    """Base class for caller-correctable scheduling failures."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str, details: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.message = message
        self.details: List[str] = list(details or [])


class ValidationError(SchedulingError):
    """Booking request has missing or malformed fields."""
    kind = ErrorKind.VALIDATION_ERROR


class SlotConflict(SchedulingError):
    """Requested date/time is already taken."""
    kind = ErrorKind.SLOT_CONFLICT

    def __init__(self, message: str, alternatives: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.alternatives: List[str] = list(alternatives or [])


class NotFound(SchedulingError):
    kind = ErrorKind.NOT_FOUND


class InvalidArgument(SchedulingError, ValueError):
    """Malformed month or date reference passed to a query."""
    kind = ErrorKind.INVALID_ARGUMENT
