"""Calendar arithmetic shared by recurrence expansion and date suggestions."""

from __future__ import annotations

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

_MONTH_LENGTHS = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _MONTH_LENGTHS[month - 1]


def clamp_day(year: int, month: int, day: int) -> int:
    """Return *day*, pulled back to the last day of the month if it overflows."""
    return min(day, days_in_month(year, month))


def shift_months(d: date, months: int) -> date:
    """Move *d* by a number of calendar months, keeping the day where possible.

    ``relativedelta`` clamps to the target month's length, so 31 Jan + 1
    month is 28/29 Feb and 29 Feb + 12 months is 28 Feb.
    """
    return d + relativedelta(months=months)


def end_of_month(d: date) -> date:
    return d.replace(day=days_in_month(d.year, d.month))


def first_of_next_month(d: date) -> date:
    return end_of_month(d) + timedelta(days=1)


def end_of_year(d: date) -> date:
    return date(d.year, 12, 31)


def next_weekday(d: date, weekday: int) -> date:
    """Nearest date strictly after *d* falling on *weekday* (Monday == 0)."""
    days_ahead = (weekday - d.weekday()) % 7 or 7
    return d + timedelta(days=days_ahead)
