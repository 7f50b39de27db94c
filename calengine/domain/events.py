"""Domain events emitted when the base event list changes."""

from __future__ import annotations

from pydantic import BaseModel

from calengine.domain.models import CalendarEvent


class EventAdded(BaseModel):
    """Fired when a new base event is stored."""

    event: CalendarEvent


class EventUpdated(BaseModel):
    """Fired when a stored base event is replaced by an edited version."""

    previous: CalendarEvent
    current: CalendarEvent


class EventDeleted(BaseModel):
    """Fired when a base event (and with it its whole series) is removed."""

    event: CalendarEvent


class EventsReloaded(BaseModel):
    """Fired when the whole base event list is swapped out."""

    count: int
