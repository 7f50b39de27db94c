"""Service for validating typed ``DD/MM`` dates and suggesting completions.

Dates are entered without a year. The year is inferred from a reference
date (usually the event's start date): a day/month at or before the
reference's day/month means "next year", anything later means "this year".
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

import dateparser

from calengine.config import get_settings
from calengine.domain.models import DateSuggestion
from calengine.services.calendar_math import (
    clamp_day,
    end_of_month,
    end_of_year,
    first_of_next_month,
    next_weekday,
    shift_months,
)

_WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_LABEL_DATE_RE = re.compile(r"\((\d{2}/\d{2})\)\s*$")


class DateInputError(ValueError):
    """A typed date could not be turned into a date; ``str(exc)`` is user-facing."""


class DateFormatError(DateInputError):
    pass


class DateRangeError(DateInputError):
    pass


class InvalidDateError(DateInputError):
    pass


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_date_input(text: str, reference_date: date) -> date:
    """Parse ``DD/MM`` into a date relative to *reference_date*.

    Blank input means "no change" and returns *reference_date* itself.
    Raises a ``DateInputError`` subclass describing what is wrong.
    """
    trimmed = text.strip()
    if not trimmed:
        return reference_date

    parts = trimmed.split("/")
    if len(parts) != 2:
        raise DateFormatError("Invalid format. Use DD/MM")

    day_part, month_part = parts
    if not _is_number(day_part):
        raise DateFormatError("Invalid day")
    if not _is_number(month_part):
        raise DateFormatError("Invalid month")
    day, month = int(day_part), int(month_part)

    if not 1 <= day <= 31:
        raise DateRangeError("Day must be between 1 and 31")
    if not 1 <= month <= 12:
        raise DateRangeError("Month must be between 1 and 12")

    year = reference_date.year
    if (month, day) <= (reference_date.month, reference_date.day):
        year += 1

    try:
        return date(year, month, day)
    except ValueError:
        raise InvalidDateError("Invalid date") from None


def check_date_input(text: str, reference_date: date) -> tuple[date | None, str | None]:
    """Non-raising form of ``validate_date_input``: ``(date, None)`` or ``(None, error)``."""
    try:
        return validate_date_input(text, reference_date), None
    except DateInputError as exc:
        return None, str(exc)


def _is_number(text: str) -> bool:
    return text.isascii() and text.isdigit()


def _is_valid(date_text: str, reference_date: date) -> bool:
    return check_date_input(date_text, reference_date)[1] is None


# ---------------------------------------------------------------------------
# Suggestions
# ---------------------------------------------------------------------------


def _ddmm(d: date) -> str:
    return f"{d.day:02d}/{d.month:02d}"


def _suggestion(label: str, reference_date: date) -> DateSuggestion:
    date_text = suggestion_date_text(label)
    return DateSuggestion(label=label, is_valid=_is_valid(date_text, reference_date))


def _labelled(label: str, d: date, reference_date: date) -> DateSuggestion:
    return _suggestion(f"{label} ({_ddmm(d)})", reference_date)


def _bare(date_text: str, reference_date: date) -> DateSuggestion:
    return _suggestion(date_text, reference_date)


def suggestion_date_text(label: str) -> str:
    """The ``DD/MM`` text a suggestion stands for.

    ``"Tomorrow (02/10)"`` gives ``"02/10"``; bare completions such as
    ``"15/10"`` are returned unchanged.
    """
    match = _LABEL_DATE_RE.search(label)
    return match.group(1) if match else label.strip()


def _fuzzy_match(alias: str, needle: str) -> bool:
    return (
        alias.startswith(needle)
        or needle.startswith(alias)
        or needle in alias
        or alias in needle
    )


def _relative_table(reference_date: date) -> list[tuple[str, date, tuple[str, ...]]]:
    tomorrow = reference_date + timedelta(days=1)
    next_week = reference_date + timedelta(weeks=1)
    next_month = first_of_next_month(reference_date)
    return [
        ("Tomorrow", tomorrow, ("tomorrow", "tom", "tomorow")),
        ("Next week", next_week, ("next week", "nextweek")),
        ("End of month", end_of_month(reference_date), ("end of month", "endofmonth", "end month")),
        ("Next month", next_month, ("next month", "nextmonth")),
        ("End of year", end_of_year(reference_date), ("end of year", "endofyear", "end year")),
        ("Same day", reference_date, ("same day", "sameday")),
        ("1 day", tomorrow, ("1 day", "1day")),
        ("1 week", next_week, ("1 week", "1week")),
        ("2 weeks", reference_date + timedelta(weeks=2), ("2 weeks", "2weeks")),
        ("1 month", next_month, ("1 month", "1month")),
    ]


def _default_suggestions(reference_date: date) -> list[DateSuggestion]:
    top = [
        ("Tomorrow", reference_date + timedelta(days=1)),
        ("Next week", reference_date + timedelta(weeks=1)),
        ("End of month", end_of_month(reference_date)),
        ("Next month", first_of_next_month(reference_date)),
        ("Same day", reference_date),
    ]
    return [DateSuggestion(label=f"{label} ({_ddmm(d)})", is_valid=True) for label, d in top]


def _day_completions(
    day: int, single_digit: bool, reference_date: date, anchor_date: date
) -> list[DateSuggestion]:
    first = anchor_date.replace(day=1)
    in_anchor_month = first.replace(day=clamp_day(first.year, first.month, day))
    # A lone digit that already passed this month is read as next month's day.
    if single_digit and in_anchor_month < anchor_date:
        first = shift_months(first, 1)

    suggestions = []
    for offset in range(get_settings().SUGGESTION_MONTHS):
        month_start = shift_months(first, offset)
        candidate = month_start.replace(
            day=clamp_day(month_start.year, month_start.month, day)
        )
        date_text = _ddmm(candidate)
        if _is_valid(date_text, reference_date):
            suggestions.append(DateSuggestion(label=date_text, is_valid=True))
    return suggestions


def _weekday_suggestion(needle: str, reference_date: date) -> DateSuggestion | None:
    for number, weekday in enumerate(_WEEKDAYS):
        full = f"next {weekday}"
        short = f"next {weekday[:3]}"
        if (
            full.startswith(needle)
            or needle.startswith(full)
            or short.startswith(needle)
            or needle.startswith(short)
            or needle in full
            or full in needle
        ):
            return _labelled(f"Next {weekday}", next_weekday(reference_date, number), reference_date)
    return None


def _partial_completion(text: str, reference_date: date) -> DateSuggestion | None:
    parts = text.split("/")
    if len(parts) != 2:
        return None
    day_part, month_part = (part.strip() for part in parts)

    if day_part and not month_part:
        if _is_number(day_part) and 1 <= int(day_part) <= 31:
            return _bare(f"{int(day_part):02d}/{reference_date.month:02d}", reference_date)
    elif month_part and not day_part:
        if _is_number(month_part) and 1 <= int(month_part) <= 12:
            return _bare(f"{reference_date.day:02d}/{int(month_part):02d}", reference_date)
    elif day_part and month_part and (len(day_part) < 2 or len(month_part) < 2):
        if _is_number(day_part) and _is_number(month_part):
            day, month = int(day_part), int(month_part)
            if 1 <= day <= 31 and 1 <= month <= 12:
                return _bare(f"{day:02d}/{month:02d}", reference_date)
    return None


def _natural_language(text: str, reference_date: date) -> DateSuggestion | None:
    settings = {
        "PREFER_DATES_FROM": "future",
        "RELATIVE_BASE": datetime.combine(reference_date, time()),
        "DATE_ORDER": "DMY",
        "RETURN_AS_TIMEZONE_AWARE": False,
    }
    result = dateparser.parse(text, languages=["en"], settings=settings)
    if result is None:
        return None
    # The label only carries DD/MM; drop dates that text would not resolve back to.
    resolved, _ = check_date_input(_ddmm(result.date()), reference_date)
    if resolved != result.date():
        return None
    return _labelled(text.strip().capitalize(), resolved, reference_date)


def get_date_suggestions(
    text: str, reference_date: date, anchor_date: date | None = None
) -> list[DateSuggestion]:
    """Suggest completions for a partially typed date.

    *reference_date* resolves relative terms and years; *anchor_date* (the
    calendar's selected date, defaulting to *reference_date*) decides which
    months a bare day number is offered in. Results are ordered by matcher:
    day-number completions, relative terms, next weekday, partial ``DD/MM``,
    then the "last day"/"first of next" anchors.
    """
    if not text.strip():
        return _default_suggestions(reference_date)

    anchor_date = anchor_date or reference_date
    needle = text.strip().lower()
    suggestions: list[DateSuggestion] = []

    if _is_number(needle) and 1 <= int(needle) <= 31:
        suggestions.extend(
            _day_completions(int(needle), len(needle) == 1, reference_date, anchor_date)
        )

    for label, target, aliases in _relative_table(reference_date):
        if any(_fuzzy_match(alias, needle) for alias in aliases):
            suggestions.append(_labelled(label, target, reference_date))

    weekday = _weekday_suggestion(needle, reference_date)
    if weekday is not None:
        suggestions.append(weekday)

    if "/" in needle:
        partial = _partial_completion(needle, reference_date)
        if partial is not None:
            suggestions.append(partial)

    if "last day" in needle or "lastday" in needle:
        suggestions.append(_labelled("Last day of month", end_of_month(reference_date), reference_date))
    if "first of next" in needle or "firstofnext" in needle:
        suggestions.append(
            _labelled("First of next month", first_of_next_month(reference_date), reference_date)
        )

    if not suggestions and "/" not in needle and any(c.isalpha() for c in needle):
        parsed = _natural_language(text, reference_date)
        if parsed is not None:
            suggestions.append(parsed)

    return suggestions
