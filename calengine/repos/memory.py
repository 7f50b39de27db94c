"""In-memory repository for base calendar events."""

from __future__ import annotations

from typing import Iterable

from calengine.domain.models import CalendarEvent


class EventRepository:
    """Dict-backed store for base CalendarEvent instances, keyed by id.

    Generated occurrences are never stored here; they live in the
    instance cache only.
    """

    def __init__(self, events: Iterable[CalendarEvent] = ()) -> None:
        self._store: dict[str, CalendarEvent] = {}
        self.replace_all(events)

    def add(self, event: CalendarEvent) -> None:
        if event.is_recurring_instance:
            raise ValueError("generated occurrences cannot be stored")
        self._store[event.id] = event

    def get(self, event_id: str) -> CalendarEvent | None:
        return self._store.get(event_id)

    def list_all(self) -> list[CalendarEvent]:
        """Return every stored event ordered by start date and time."""
        return sorted(self._store.values(), key=lambda e: (e.start_date, e.start_time))

    def update(self, event: CalendarEvent) -> None:
        if event.id not in self._store:
            raise KeyError(event.id)
        self._store[event.id] = event

    def delete(self, event_id: str) -> CalendarEvent | None:
        return self._store.pop(event_id, None)

    def replace_all(self, events: Iterable[CalendarEvent]) -> None:
        self._store = {}
        for event in events:
            self.add(event)

    def __len__(self) -> int:
        return len(self._store)
