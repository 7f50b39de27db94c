"""Domain event handlers that keep the instance cache in step with the event list."""

from __future__ import annotations

import logging

from calengine.domain.bus import EventBus
from calengine.domain.events import EventAdded, EventDeleted, EventsReloaded, EventUpdated
from calengine.services.instance_cache import InstanceCache

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires cache-invalidation handlers to the bus."""

    def __init__(self, bus: EventBus, cache: InstanceCache) -> None:
        self.bus = bus
        self.cache = cache
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventAdded, self.on_event_added)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventDeleted, self.on_event_deleted)
        self.bus.subscribe(EventsReloaded, self.on_events_reloaded)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_added(self, event: EventAdded) -> None:
        # A new series needs expanding across the whole current window.
        self.cache.invalidate()

    def on_event_updated(self, event: EventUpdated) -> None:
        if event.previous.recurrence != event.current.recurrence:
            logger.debug(
                "Recurrence of %r changed from %s to %s",
                event.current.title,
                event.previous.recurrence,
                event.current.recurrence,
            )
        self.cache.invalidate()

    def on_event_deleted(self, event: EventDeleted) -> None:
        # Occurrences are keyed by (title, base_date), which another series may share.
        self.cache.invalidate()

    def on_events_reloaded(self, event: EventsReloaded) -> None:
        logger.info("Event list reloaded with %d event(s)", event.count)
        self.cache.invalidate()
