from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from cally.errors import ErrorKind, SchedulingError
from cally.models.appointment import Appointment

T = TypeVar("T")


@dataclass
class Failure:
    """Typed description of a rejected request."""
    kind: ErrorKind
    message: str
    details: List[str] = field(default_factory=list)

    @classmethod
    def from_error(cls, error: SchedulingError) -> "Failure":
        return cls(kind=error.kind, message=error.message, details=list(error.details))


@dataclass
class BookingResult:
    """Type-safe result for commit and cancel."""
    status: str
    message: str
    appointment: Optional[Appointment] = None
    error: Optional[Failure] = None
    alternatives: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class QueryResult(Generic[T]):
    """Type-safe result for read-only queries."""
    status: str
    message: str
    data: Optional[T] = None
    error: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.error is None
