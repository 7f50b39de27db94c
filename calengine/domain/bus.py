"""Synchronous in-process bus for event-list change notifications."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

Handler = Callable[[Any], None]


class EventBus:
    """Delivers each published change to the handlers subscribed to its type.

    Delivery is synchronous and in subscription order; a handler that raises
    stops delivery and the exception reaches the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, change_type: type, handler: Handler) -> None:
        self._subscribers[change_type].append(handler)

    def publish(self, change: Any) -> None:
        for handler in self._subscribers.get(type(change), []):
            handler(change)
