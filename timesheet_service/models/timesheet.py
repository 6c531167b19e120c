"""Timesheet model definitions."""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from timesheet_service.errors import InvalidFormatError
from timesheet_service.utils.time_arithmetic import parse_clock_time

DAY_NAMES = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


class DayRecord(BaseModel):
    """One day of a weekly timesheet."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    date: str = ""
    start: Optional[str] = None
    break_hours: int = Field(default=0, ge=0)
    break_minutes: int = Field(default=0, ge=0, le=59)
    finish: Optional[str] = None
    total: str = "0:00"

    @field_validator("start", "finish", mode="before")
    @classmethod
    def normalise_clock_time(cls, value):
        if value is None or isinstance(value, str):
            return parse_clock_time(value)
        raise InvalidFormatError(f"Invalid time format: {value!r}")

    @field_validator("break_hours", "break_minutes", mode="before")
    @classmethod
    def blank_break_is_zero(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0
        return value


class WeekTimesheet(BaseModel):
    """
    A week of day records keyed by day name.

    ``total`` and ``weekly_total`` are derived from the source fields and
    are recomputed whenever a week is loaded, edited or saved.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    week_start: date
    weekly_total: str = "0:00"
    data: dict[str, DayRecord]

    @field_validator("week_start")
    @classmethod
    def week_starts_on_monday(cls, value: date) -> date:
        if value.weekday() != 0:
            raise ValueError("week_start must be a Monday")
        return value

    @field_validator("data")
    @classmethod
    def has_every_day(cls, value: dict[str, DayRecord]) -> dict[str, DayRecord]:
        if set(value) != set(DAY_NAMES):
            raise ValueError(f"data must contain exactly the days {', '.join(DAY_NAMES)}")
        # Keep calendar order regardless of input order
        return {day: value[day] for day in DAY_NAMES}


class WeekNavigation(BaseModel):
    """Week starts for moving around the timesheet calendar."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    week_start: date
    previous_week: date
    next_week: date
    current_week: date
