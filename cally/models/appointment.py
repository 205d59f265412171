from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

REQUIRED_BOOKING_FIELDS = ("date", "time", "service_type", "service_name")


class Appointment(BaseModel):
    """A committed booking. Immutable once created."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Opaque appointment identifier")
    date: date
    time: str = Field(..., description="Slot label, e.g. '10:00 AM'")
    service_type: str = Field(..., description="One of the configured service types")
    service_name: str
    location: Optional[str] = None
    client_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class BookingRequest(BaseModel):
    """Incoming booking. Fields stay optional so missing ones can be reported together."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    date: Any = Field(None, description="Calendar date (date, datetime or 'YYYY-MM-DD')")
    time: Optional[str] = Field(None, description="Slot label from the slot template")
    service_type: Optional[str] = None
    service_name: Optional[str] = None
    notes: Optional[str] = None
    client_name: Optional[str] = None
    location: Optional[str] = None

    @field_validator("service_type")
    def normalize_service_type(cls, v):
        if v:
            return v.lower()
        return v

    @field_validator("notes", "client_name", "location")
    def blank_to_none(cls, v):
        return v or None

    def missing_fields(self) -> List[str]:
        """Required fields that are absent or blank, by their external names."""
        missing = []
        for name in REQUIRED_BOOKING_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(to_camel(name))
        return missing
