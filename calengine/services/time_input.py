"""Service for normalising typed event times to ``HH:MM``."""

from __future__ import annotations

from datetime import datetime, time


class TimeInputError(ValueError):
    pass


def normalize_time_input(text: str) -> str:
    """Normalise ``"14"``, ``"9"`` or ``"9:5"`` to ``HH:MM``.

    Input that cannot be read as an hour (optionally with minutes) is
    returned trimmed but otherwise untouched, leaving the rejection to
    ``parse_time_input``.
    """
    trimmed = text.strip()

    if ":" in trimmed:
        parts = trimmed.split(":")
        if len(parts) == 2 and all(p.isascii() and p.isdigit() for p in parts):
            hour, minute = int(parts[0]), int(parts[1])
            return f"{hour:02d}:{minute:02d}"
        return trimmed

    if trimmed.isascii() and trimmed.isdigit() and int(trimmed) <= 23:
        return f"{int(trimmed):02d}:00"

    return trimmed


def parse_time_input(text: str) -> time | None:
    """Parse a typed time; blank input means an all-day event and returns ``None``."""
    normalized = normalize_time_input(text)
    if not normalized:
        return None
    try:
        return datetime.strptime(normalized, "%H:%M").time()
    except ValueError:
        raise TimeInputError("Invalid time format. Use HH:MM") from None
