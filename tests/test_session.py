"""Tests for the calendar session and its bus-driven cache invalidation."""

from __future__ import annotations

from datetime import date, time

import pytest

from calengine.domain.bus import EventBus
from calengine.domain.events import EventAdded, EventDeleted
from calengine.domain.models import CalendarEvent, Recurrence
from calengine.repos.memory import EventRepository
from calengine.services.instance_cache import InstanceCache
from calengine.services.session import CalendarSession

_START = date(2025, 10, 1)
_END = date(2025, 10, 31)


@pytest.fixture()
def session() -> CalendarSession:
    """Fresh repo + cache + bus for each test."""
    return CalendarSession(
        repo=EventRepository(),
        cache=InstanceCache(buffer_days=365),
        bus=EventBus(),
    )


def _weekly(title: str = "Weekly Meeting") -> CalendarEvent:
    return CalendarEvent(
        title=title,
        start_date=date(2025, 10, 15),
        start_time=time(10, 0),
        recurrence=Recurrence.WEEKLY,
    )


def _meeting() -> CalendarEvent:
    return CalendarEvent(title="Meeting", start_date=date(2025, 10, 15), start_time=time(10, 0))


# ---------------------------------------------------------------------------
# Invalidation wiring
# ---------------------------------------------------------------------------


def test_add_event_invalidates_and_regenerates(session):
    before = session.events_for_range(_START, _END)
    assert session.cache.cached_window is not None

    session.add_event(_weekly())

    assert session.cache.cached_window is None
    assert session.cache.cached_instances == []

    after = session.events_for_range(_START, _END)
    assert session.cache.cached_window is not None
    assert len(after) > len(before)
    assert any(e.title == "Weekly Meeting" and e.is_recurring_instance for e in after)


def test_delete_event_invalidates_fully(session):
    meeting = session.add_event(_weekly())
    session.add_event(_weekly("Gym"))
    session.events_for_range(_START, _END)

    session.delete_event(meeting)

    assert session.cache.cached_window is None
    assert session.repo.get(meeting.id) is None
    titles = {e.title for e in session.events_for_range(_START, _END)}
    assert titles == {"Gym"}


def test_delete_keeps_series_sharing_title_and_start(session):
    weekly = session.add_event(_weekly("Standup"))
    session.add_event(
        CalendarEvent(
            title="Standup",
            start_date=date(2025, 10, 15),
            start_time=time(9, 0),
            recurrence=Recurrence.DAILY,
        )
    )
    session.events_for_range(_START, _END)

    session.delete_event(weekly)
    events = session.events_for_range(_START, _END)

    occurrences = [e for e in events if e.is_recurring_instance]
    # Daily from 16 Oct through 31 Oct.
    assert len(occurrences) == 16
    assert all(e.start_time == time(9, 0) for e in occurrences)


def test_edit_event_invalidates_fully(session):
    meeting = session.add_event(_meeting())
    session.events_for_range(_START, _END)

    updated = session.update_event(meeting.id, {"title": "Updated Meeting"})

    assert updated.title == "Updated Meeting"
    assert updated.id == meeting.id
    assert session.cache.cached_window is None
    assert session.cache.cached_instances == []


def test_edit_to_recurring_generates_occurrences(session):
    meeting = session.add_event(_meeting())
    session.events_for_range(_START, _END)

    session.update_event(meeting.id, {"recurrence": Recurrence.DAILY})
    events = session.events_for_range(_START, _END)

    assert any(e.is_recurring_instance for e in events)


def test_update_rejects_invalid_changes(session):
    meeting = session.add_event(_meeting())
    with pytest.raises(ValueError):
        session.update_event(meeting.id, {"end_date": date(2025, 10, 1)})
    assert session.repo.get(meeting.id) == meeting


def test_update_unknown_event(session):
    with pytest.raises(KeyError):
        session.update_event("missing", {"title": "x"})


def test_reload_invalidates(session):
    session.add_event(_weekly())
    session.events_for_range(_START, _END)

    session.reload([_meeting()])

    assert session.cache.cached_window is None
    assert [e.title for e in session.events_for_range(_START, _END)] == ["Meeting"]


def test_mutations_publish_domain_events(session):
    seen = []
    session.bus.subscribe(EventAdded, seen.append)
    session.bus.subscribe(EventDeleted, seen.append)

    event = session.add_event(_meeting())
    session.delete_event(event)

    assert [type(e) for e in seen] == [EventAdded, EventDeleted]
    assert seen[1].event.id == event.id


# ---------------------------------------------------------------------------
# Series handling
# ---------------------------------------------------------------------------


def test_deleting_an_occurrence_deletes_the_series(session):
    base = session.add_event(_weekly())
    occurrence = next(
        e for e in session.events_for_range(_START, _END) if e.is_recurring_instance
    )

    removed = session.delete_event(occurrence)

    assert removed.id == base.id
    assert len(session.repo) == 0
    assert session.events_for_range(_START, _END) == []


def test_base_event_for_orphaned_occurrence(session):
    base = _weekly()
    session.add_event(base)
    occurrence = next(
        e for e in session.events_for_range(_START, _END) if e.is_recurring_instance
    )
    session.repo.delete(base.id)

    with pytest.raises(LookupError):
        session.base_event_for(occurrence)


def test_events_on_day_includes_occurrences_and_spans(session):
    session.add_event(_weekly())
    session.add_event(
        CalendarEvent(
            title="Conference",
            start_date=date(2025, 10, 21),
            end_date=date(2025, 10, 23),
            is_all_day=True,
        )
    )

    titles = [e.title for e in session.events_on(date(2025, 10, 22))]

    assert titles == ["Conference", "Weekly Meeting"]


# ---------------------------------------------------------------------------
# Cleanup
# ---------------------------------------------------------------------------


def test_cleanup_expired_keeps_recurring_and_recent(session):
    session.add_event(CalendarEvent(title="Old", start_date=date(2025, 1, 10)))
    session.add_event(CalendarEvent(title="Recent", start_date=date(2025, 9, 10)))
    session.add_event(
        CalendarEvent(title="Yearly", start_date=date(2020, 1, 1), recurrence=Recurrence.YEARLY)
    )

    removed = session.cleanup_expired(today=date(2025, 10, 15))

    assert removed == 1
    assert sorted(e.title for e in session.repo.list_all()) == ["Recent", "Yearly"]


def test_cleanup_with_explicit_cutoff(session):
    session.add_event(CalendarEvent(title="Old", start_date=date(2025, 1, 10)))
    assert session.cleanup_expired(cutoff=date(2025, 1, 1)) == 0
    assert session.cleanup_expired(cutoff=date(2025, 2, 1)) == 1


# ---------------------------------------------------------------------------
# Models and repository
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text, expected",
    [
        ("weekly", Recurrence.WEEKLY),
        (" Monthly ", Recurrence.MONTHLY),
        ("fortnightly", Recurrence.NONE),
        (None, Recurrence.NONE),
    ],
)
def test_recurrence_parse(text, expected):
    assert Recurrence.parse(text) is expected


def test_repository_refuses_generated_occurrences():
    repo = EventRepository()
    occurrence = CalendarEvent(
        title="Standup",
        start_date=date(2025, 10, 22),
        is_recurring_instance=True,
        base_date=date(2025, 10, 15),
    )
    with pytest.raises(ValueError):
        repo.add(occurrence)


def test_occurrence_cannot_recur():
    with pytest.raises(ValueError):
        CalendarEvent(
            title="Standup",
            start_date=date(2025, 10, 22),
            recurrence=Recurrence.DAILY,
            is_recurring_instance=True,
            base_date=date(2025, 10, 15),
        )


def test_all_day_event_uses_midnight():
    event = CalendarEvent(title="Holiday", start_date=date(2025, 12, 25), start_time=time(9, 0), is_all_day=True)
    assert event.start_time == time(0, 0)
