"""Domain models for calendar events and their generated occurrences."""

from __future__ import annotations

import uuid
from datetime import date, time, timedelta
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class Recurrence(StrEnum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, text: str | None) -> Recurrence:
        """Map free text such as ``"Weekly "`` to a member; unknown text is NONE."""
        if not text:
            return cls.NONE
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.NONE


MIDNIGHT = time(0, 0)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class CalendarEvent(BaseModel):
    """A user-authored base event, or an occurrence generated from one.

    Occurrences carry ``is_recurring_instance=True`` and point back at the
    base event's original start date through ``base_date``.
    """

    id: str = Field(default_factory=_new_id)
    title: str
    description: str = ""
    start_date: date
    start_time: time = MIDNIGHT
    is_all_day: bool = False
    end_date: date | None = None
    end_time: time | None = None
    recurrence: Recurrence = Recurrence.NONE
    is_recurring_instance: bool = False
    base_date: date | None = None

    @model_validator(mode="after")
    def _check_consistency(self) -> CalendarEvent:
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.is_recurring_instance:
            if self.base_date is None:
                raise ValueError("recurring instance must carry base_date")
            if self.recurrence != Recurrence.NONE:
                raise ValueError("recurring instance cannot itself recur")
        elif self.base_date is not None:
            raise ValueError("base_date is only valid on recurring instances")
        if self.is_all_day:
            self.start_time = MIDNIGHT
        return self

    @property
    def effective_end_date(self) -> date:
        return self.end_date or self.start_date

    @property
    def effective_end_time(self) -> time:
        return self.end_time or self.start_time

    @property
    def span(self) -> timedelta:
        """Day-count distance from start to end; zero for single-day events."""
        return self.effective_end_date - self.start_date

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.effective_end_date


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventPayload(BaseModel):
    title: str
    description: str = ""
    start_date: date
    start_time: time | None = None
    end_date: date | None = None
    end_time: time | None = None
    recurrence: Recurrence = Recurrence.NONE

    @field_validator("recurrence", mode="before")
    @classmethod
    def _lenient_recurrence(cls, value):
        """Accept "Weekly " and the like; unrecognised text means no repeat."""
        return Recurrence.parse(value) if isinstance(value, str) else value


class EventPatch(BaseModel):
    title: str | None = None
    description: str | None = None
    start_date: date | None = None
    start_time: time | None = None
    end_date: date | None = None
    end_time: time | None = None
    recurrence: Recurrence | None = None

    @field_validator("recurrence", mode="before")
    @classmethod
    def _lenient_recurrence(cls, value):
        return Recurrence.parse(value) if isinstance(value, str) else value


class DateInputRequest(BaseModel):
    text: str = ""
    reference_date: date
    anchor_date: date | None = None


class DateValidationResponse(BaseModel):
    valid: bool
    resolved_date: date | None = None
    error: str | None = None


class DateSuggestion(BaseModel):
    label: str
    is_valid: bool


class TimeInputRequest(BaseModel):
    text: str = ""


class TimeInputResponse(BaseModel):
    normalized: str
    resolved_time: time | None = None
    all_day: bool = False
    error: str | None = None


class CleanupResponse(BaseModel):
    removed: int
    cutoff: date
