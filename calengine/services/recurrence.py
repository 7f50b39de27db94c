"""Service for expanding recurring base events into dated occurrences."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from calengine.config import get_settings
from calengine.domain.models import CalendarEvent, Recurrence
from calengine.services.calendar_math import shift_months


def _nth_date(start: date, recurrence: Recurrence, n: int) -> date:
    """Date of the n-th repetition after *start*.

    Always measured from *start* so that clamping is never compounded: a
    monthly event on the 31st lands on 30 Apr and then 31 May again.
    """
    if recurrence == Recurrence.DAILY:
        return start + timedelta(days=n)
    if recurrence == Recurrence.WEEKLY:
        return start + timedelta(weeks=n)
    if recurrence == Recurrence.MONTHLY:
        return shift_months(start, n)
    if recurrence == Recurrence.YEARLY:
        return shift_months(start, 12 * n)
    raise ValueError(f"{recurrence!r} does not repeat")


def expand_recurrence(base: CalendarEvent, until: date) -> list[CalendarEvent]:
    """Expand a recurring base event into occurrences up to and including *until*.

    The base's own date is excluded from the result (the base event already
    represents it). Each occurrence copies the base's title, description and
    times, keeps the base's start-to-end span, and records the base's start
    date in ``base_date``. Events without a recurrence yield ``[]``.
    """
    if base.recurrence == Recurrence.NONE:
        return []

    span = base.end_date - base.start_date if base.end_date is not None else None

    occurrences: list[CalendarEvent] = []
    n = 1
    current = _nth_date(base.start_date, base.recurrence, n)
    while current <= until:
        occurrences.append(
            CalendarEvent(
                id=f"{base.id}@{current.isoformat()}",
                title=base.title,
                description=base.description,
                start_date=current,
                start_time=base.start_time,
                is_all_day=base.is_all_day,
                end_date=current + span if span is not None else None,
                end_time=base.end_time,
                recurrence=Recurrence.NONE,
                is_recurring_instance=True,
                base_date=base.start_date,
            )
        )
        n += 1
        current = _nth_date(base.start_date, base.recurrence, n)

    return occurrences


def find_base_event(
    instance: CalendarEvent, events: Iterable[CalendarEvent]
) -> CalendarEvent | None:
    """Return the base event an occurrence was generated from, if still present."""
    if not instance.is_recurring_instance:
        return None
    for event in events:
        if (
            not event.is_recurring_instance
            and event.start_date == instance.base_date
            and event.title == instance.title
            and event.start_time == instance.start_time
            and event.description == instance.description
        ):
            return event
    return None


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------


def is_finished_before(event: CalendarEvent, cutoff: date) -> bool:
    # Recurring series keep producing future occurrences, so they never expire.
    if event.recurrence != Recurrence.NONE:
        return False
    return event.effective_end_date < cutoff


def select_expired(events: Iterable[CalendarEvent], cutoff: date) -> list[CalendarEvent]:
    """Base events that finished before *cutoff*; occurrences are ignored."""
    return [
        event
        for event in events
        if not event.is_recurring_instance and is_finished_before(event, cutoff)
    ]


def default_cleanup_cutoff(today: date) -> date:
    return shift_months(today, -get_settings().RETENTION_MONTHS)
