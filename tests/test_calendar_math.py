"""Tests for the calendar arithmetic helpers."""

from __future__ import annotations

from datetime import date

from calengine.services.calendar_math import (
    clamp_day,
    days_in_month,
    end_of_month,
    end_of_year,
    first_of_next_month,
    is_leap_year,
    next_weekday,
    shift_months,
)


def test_leap_year_rule():
    assert is_leap_year(2024)
    assert is_leap_year(2000)
    assert not is_leap_year(1900)
    assert not is_leap_year(2023)


def test_days_in_month():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert days_in_month(2023, 4) == 30
    assert days_in_month(2023, 12) == 31


def test_clamp_day():
    assert clamp_day(2023, 2, 29) == 28
    assert clamp_day(2024, 2, 31) == 29
    assert clamp_day(2023, 11, 31) == 30
    assert clamp_day(2023, 10, 15) == 15


def test_shift_months_clamps_and_rolls_over_year():
    assert shift_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert shift_months(date(2023, 12, 15), 1) == date(2024, 1, 15)
    assert shift_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


def test_month_and_year_boundaries():
    assert end_of_month(date(2023, 10, 1)) == date(2023, 10, 31)
    assert end_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
    assert first_of_next_month(date(2023, 12, 31)) == date(2024, 1, 1)
    assert end_of_year(date(2023, 3, 3)) == date(2023, 12, 31)


def test_next_weekday_is_strictly_after():
    sunday = date(2023, 10, 1)
    assert next_weekday(sunday, 0) == date(2023, 10, 2)
    # Same weekday means a full week ahead, never the day itself.
    assert next_weekday(sunday, 6) == date(2023, 10, 8)
