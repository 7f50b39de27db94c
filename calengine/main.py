"""FastAPI application: HTTP surface over the calendar event engine."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import FastAPI, HTTPException

from calengine.config import get_settings
from calengine.domain.models import (
    MIDNIGHT,
    CalendarEvent,
    CleanupResponse,
    DateInputRequest,
    DateSuggestion,
    DateValidationResponse,
    EventPatch,
    EventPayload,
    TimeInputRequest,
    TimeInputResponse,
)
from calengine.services.date_input import check_date_input, get_date_suggestions
from calengine.services.recurrence import default_cleanup_cutoff
from calengine.services.session import CalendarSession
from calengine.services.time_input import (
    TimeInputError,
    normalize_time_input,
    parse_time_input,
)

logging.basicConfig(level=get_settings().LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Calendar Event Engine")

# ── Singleton (created at import time for simplicity) ─────────────────
session = CalendarSession()


def _get_or_404(event_id: str) -> CalendarEvent:
    event = session.repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


# ── Events ────────────────────────────────────────────────────────────


@app.get("/events", response_model=list[CalendarEvent])
def list_events(start: date, end: date) -> list[CalendarEvent]:
    """Return base events and generated occurrences, sorted by date and time."""
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")
    return session.events_for_range(start, end)


@app.get("/events/{event_id}", response_model=CalendarEvent)
def get_event(event_id: str) -> CalendarEvent:
    return _get_or_404(event_id)


@app.post("/events", response_model=CalendarEvent, status_code=201)
def create_event(payload: EventPayload) -> CalendarEvent:
    """Store a new base event; a missing start time makes it all-day."""
    try:
        event = CalendarEvent(
            title=payload.title,
            description=payload.description,
            start_date=payload.start_date,
            start_time=payload.start_time or MIDNIGHT,
            is_all_day=payload.start_time is None,
            end_date=payload.end_date,
            end_time=payload.end_time,
            recurrence=payload.recurrence,
        )
    except ValueError as exc:
        logger.info("Rejected new event %r: %s", payload.title, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return session.add_event(event)


@app.patch("/events/{event_id}", response_model=CalendarEvent)
def update_event(event_id: str, patch: EventPatch) -> CalendarEvent:
    _get_or_404(event_id)
    changes = patch.model_dump(exclude_unset=True)
    if "start_time" in changes:
        changes["is_all_day"] = changes["start_time"] is None
        changes["start_time"] = changes["start_time"] or MIDNIGHT
    try:
        return session.update_event(event_id, changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.delete("/events/{event_id}", status_code=200)
def delete_event(event_id: str) -> dict:
    """Delete a base event together with all of its occurrences."""
    event = _get_or_404(event_id)
    session.delete_event(event)
    return {"status": "deleted", "id": event_id}


@app.post("/events/cleanup", response_model=CleanupResponse)
def cleanup_events(today: date | None = None) -> CleanupResponse:
    """Remove finished one-off events older than the retention period."""
    cutoff = default_cleanup_cutoff(today or date.today())
    removed = session.cleanup_expired(cutoff=cutoff)
    return CleanupResponse(removed=removed, cutoff=cutoff)


# ── Date and time input ───────────────────────────────────────────────


@app.post("/dates/validate", response_model=DateValidationResponse)
def validate_date(body: DateInputRequest) -> DateValidationResponse:
    resolved, error = check_date_input(body.text, body.reference_date)
    return DateValidationResponse(valid=error is None, resolved_date=resolved, error=error)


@app.post("/dates/suggest", response_model=list[DateSuggestion])
def suggest_dates(body: DateInputRequest) -> list[DateSuggestion]:
    return get_date_suggestions(body.text, body.reference_date, body.anchor_date)


@app.post("/times/normalize", response_model=TimeInputResponse)
def normalize_time(body: TimeInputRequest) -> TimeInputResponse:
    normalized = normalize_time_input(body.text)
    try:
        parsed = parse_time_input(body.text)
    except TimeInputError as exc:
        return TimeInputResponse(normalized=normalized, error=str(exc))
    return TimeInputResponse(
        normalized=normalized, resolved_time=parsed, all_day=parsed is None
    )
