import calendar
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings

from cally.dates import minute_of_day

DEFAULT_SERVICE_TYPES = ["haircut", "dental", "fitness", "spa", "medical"]

DEFAULT_SLOT_TEMPLATE = [
    "09:00 AM", "10:00 AM", "11:00 AM", "12:00 PM",
    "01:00 PM", "02:00 PM", "03:00 PM", "04:00 PM", "05:00 PM",
]

WEEKDAYS = [name.lower() for name in calendar.day_name]


class Settings(BaseSettings):
    """Scheduling engine configuration"""

    service_types: List[str] = DEFAULT_SERVICE_TYPES
    slot_template: List[str] = DEFAULT_SLOT_TEMPLATE
    cell_preview_limit: int = 3
    week_starts_on: str = "sunday"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "CALLY_"
        extra = "ignore"

    @field_validator("service_types")
    def validate_service_types(cls, v):
        cleaned = [s.strip().lower() for s in v]
        if not cleaned or any(not s for s in cleaned):
            raise ValueError("service_types must be a non-empty list of names")
        if "all" in cleaned:
            raise ValueError("'all' is reserved for the service filter")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("service_types must be unique")
        return cleaned

    @field_validator("slot_template")
    def validate_slot_template(cls, v):
        if not v:
            raise ValueError("slot_template must list at least one time")
        seen = set()
        for label in v:
            minutes = minute_of_day(label)
            if minutes is None:
                raise ValueError(f"Invalid slot label: {label!r}")
            if minutes in seen:
                raise ValueError(f"Duplicate slot label: {label!r}")
            seen.add(minutes)
        return [label.strip() for label in v]

    @field_validator("cell_preview_limit")
    def validate_preview_limit(cls, v):
        if v < 0:
            raise ValueError("cell_preview_limit must be >= 0")
        return v

    @field_validator("week_starts_on")
    def validate_week_start(cls, v):
        day = v.strip().lower()
        if day not in WEEKDAYS:
            raise ValueError(f"week_starts_on must be a weekday name, got {v!r}")
        return day

    @property
    def first_weekday(self) -> int:
        """calendar-module weekday number (Monday is 0)."""
        return WEEKDAYS.index(self.week_starts_on)


settings = Settings()
