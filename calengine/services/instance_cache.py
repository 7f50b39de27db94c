"""Windowed cache of generated occurrences for range queries."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

from calengine.config import get_settings
from calengine.domain.models import CalendarEvent, Recurrence
from calengine.services.recurrence import expand_recurrence

logger = logging.getLogger(__name__)


def _sort_key(event: CalendarEvent) -> tuple:
    return (event.start_date, event.start_time)


class InstanceCache:
    """Holds the occurrences materialised for a single date window.

    A query for ``[start, end]`` works on the window
    ``[start - buffer, end + buffer]``; as long as successive queries map to
    the same window the cached occurrences are reused. The cache does not
    watch the event list: callers must ``invalidate`` after every change to
    the base events or stale occurrences will be served.
    """

    def __init__(self, buffer_days: int | None = None) -> None:
        if buffer_days is None:
            buffer_days = get_settings().CACHE_BUFFER_DAYS
        self.buffer = timedelta(days=buffer_days)
        self.cached_window: tuple[date, date] | None = None
        self.cached_instances: list[CalendarEvent] = []

    def window_for(self, range_start: date, range_end: date) -> tuple[date, date]:
        return range_start - self.buffer, range_end + self.buffer

    def query(
        self,
        events: Iterable[CalendarEvent],
        range_start: date,
        range_end: date,
    ) -> list[CalendarEvent]:
        """Return all base events plus cached occurrences, sorted by date and time.

        Ties keep merge order: base events first (as given), then occurrences
        in generation order.
        """
        base_events = list(events)
        window = self.window_for(range_start, range_end)

        if self.cached_window == window:
            logger.debug("Instance cache hit for window %s..%s", *window)
        else:
            logger.debug("Instance cache miss, expanding window %s..%s", *window)
            instances: list[CalendarEvent] = []
            for event in base_events:
                if event.recurrence != Recurrence.NONE:
                    instances.extend(expand_recurrence(event, window[1]))
            self.cached_instances = instances
            self.cached_window = window
            logger.debug("Generated %d occurrence(s)", len(instances))

        return sorted(base_events + self.cached_instances, key=_sort_key)

    def invalidate(self, scope: CalendarEvent | None = None) -> None:
        """Drop cached occurrences.

        With no *scope* everything is cleared and the next query regenerates.
        With a base event as *scope* only occurrences matching its title and
        start date are removed; the window is kept because occurrences of
        other events are still valid for it.
        """
        if scope is None:
            self.cached_instances = []
            self.cached_window = None
            logger.debug("Instance cache fully invalidated")
            return

        before = len(self.cached_instances)
        self.cached_instances = [
            instance
            for instance in self.cached_instances
            if not (
                instance.title == scope.title
                and instance.base_date == scope.start_date
            )
        ]
        logger.debug(
            "Instance cache dropped %d occurrence(s) of %r",
            before - len(self.cached_instances),
            scope.title,
        )
