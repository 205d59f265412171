from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cally.models.appointment import Appointment


class TimeSlot(BaseModel):
    """One bookable slot of a day, recomputed on every read."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    time: str
    is_available: bool
    service_type: Optional[str] = Field(None, description="Occupying appointment's service type")
    service_name: Optional[str] = Field(None, description="Occupying appointment's service name")
    appointment_id: Optional[str] = None


class DaySummary(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    date: date
    total: int
    available: int
    booked: int


class CalendarCell(BaseModel):
    """A single day of the month grid."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    date: date
    is_current_month: bool
    is_today: bool
    appointment_count: int = 0
    preview: List[Appointment] = Field(default_factory=list, description="First appointments of the day, by time")
    overflow_count: int = Field(0, description="Appointments not shown in the preview")


class DayGroup(BaseModel):
    """A contiguous run of upcoming appointments sharing one date."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    date: date
    appointments: List[Appointment]


class AgendaView(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    today: List[Appointment] = Field(default_factory=list)
    upcoming_groups: List[DayGroup] = Field(default_factory=list)

    @property
    def upcoming(self) -> List[Appointment]:
        return [appointment for group in self.upcoming_groups for appointment in group.appointments]
