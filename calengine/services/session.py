"""Calendar session: the owner of the base event list and its instance cache."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable

from calengine.domain.bus import EventBus
from calengine.domain.events import EventAdded, EventDeleted, EventsReloaded, EventUpdated
from calengine.domain.handlers import HandlerRegistry
from calengine.domain.models import CalendarEvent
from calengine.repos.memory import EventRepository
from calengine.services.instance_cache import InstanceCache
from calengine.services.recurrence import (
    default_cleanup_cutoff,
    find_base_event,
    select_expired,
)

logger = logging.getLogger(__name__)


class CalendarSession:
    """Routes every change to the event list through the bus.

    Mutations publish a domain event; the registered handlers invalidate the
    instance cache before control returns, so the next range query never
    sees occurrences computed from an outdated event list.
    """

    def __init__(
        self,
        repo: EventRepository | None = None,
        cache: InstanceCache | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.repo = repo or EventRepository()
        self.cache = cache or InstanceCache()
        self.bus = bus or EventBus()
        self.handlers = HandlerRegistry(bus=self.bus, cache=self.cache)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def events_for_range(self, range_start: date, range_end: date) -> list[CalendarEvent]:
        return self.cache.query(self.repo.list_all(), range_start, range_end)

    def events_on(self, day: date) -> list[CalendarEvent]:
        """Base events and occurrences whose date span includes *day*."""
        return [e for e in self.events_for_range(day, day) if e.covers(day)]

    def base_event_for(self, event: CalendarEvent) -> CalendarEvent:
        """The stored event behind *event*: itself for base events, its series base otherwise."""
        if not event.is_recurring_instance:
            return event
        base = find_base_event(event, self.repo.list_all())
        if base is None:
            raise LookupError(f"no base event found for occurrence {event.id}")
        return base

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_event(self, event: CalendarEvent) -> CalendarEvent:
        self.repo.add(event)
        logger.info("Added event %r on %s", event.title, event.start_date)
        self.bus.publish(EventAdded(event=event))
        return event

    def update_event(self, event_id: str, changes: dict[str, Any]) -> CalendarEvent:
        previous = self.repo.get(event_id)
        if previous is None:
            raise KeyError(event_id)
        # Re-validate through the model rather than model_copy, which skips validation.
        current = CalendarEvent.model_validate({**previous.model_dump(), **changes, "id": event_id})
        self.repo.update(current)
        logger.info("Updated event %r", current.title)
        self.bus.publish(EventUpdated(previous=previous, current=current))
        return current

    def delete_event(self, event: CalendarEvent) -> CalendarEvent:
        """Delete an event; deleting an occurrence deletes its whole series."""
        base = self.base_event_for(event)
        removed = self.repo.delete(base.id)
        if removed is None:
            raise KeyError(base.id)
        logger.info("Deleted event %r", removed.title)
        self.bus.publish(EventDeleted(event=removed))
        return removed

    def reload(self, events: Iterable[CalendarEvent]) -> None:
        self.repo.replace_all(events)
        self.bus.publish(EventsReloaded(count=len(self.repo)))

    def cleanup_expired(self, cutoff: date | None = None, today: date | None = None) -> int:
        """Delete one-off events that ended before *cutoff*; returns how many went."""
        if cutoff is None:
            cutoff = default_cleanup_cutoff(today or date.today())
        expired = select_expired(self.repo.list_all(), cutoff)
        for event in expired:
            self.delete_event(event)
        if expired:
            logger.info("Cleaned up %d old event(s) before %s", len(expired), cutoff)
        return len(expired)
