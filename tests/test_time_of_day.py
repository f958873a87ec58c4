"""
Tests for time-of-day and calendar-date helpers.
"""

from __future__ import annotations

from datetime import date, time

import pytest

from clinic_booking.application.exceptions import InvalidTimeFormat
from clinic_booking.application.utils.calendar_dates import day_of_week, parse_calendar_date
from clinic_booking.application.utils.time_of_day import (
    format_time_of_day,
    intervals_overlap,
    normalize_time_text,
    parse_time_of_day,
)


def test_parse_accepts_minutes_and_seconds_forms():
    assert parse_time_of_day("09:30") == time(9, 30)
    assert parse_time_of_day("17:00:45") == time(17, 0)
    assert parse_time_of_day("7:05") == time(7, 5)


@pytest.mark.parametrize("text", ["24:00", "12:60", "noon", "", "12", "12:30:00:00", None])
def test_parse_rejects_invalid_values(text):
    with pytest.raises(InvalidTimeFormat):
        parse_time_of_day(text)


def test_format_is_zero_padded_24_hour():
    assert format_time_of_day(time(9, 5)) == "09:05"
    assert format_time_of_day(time(23, 40)) == "23:40"
    assert normalize_time_text("9:00:00") == "09:00"


def test_partial_overlap_detected():
    assert intervals_overlap(time(10, 0), time(10, 30), time(10, 15), time(10, 45)) is True
    assert intervals_overlap(time(10, 15), time(10, 45), time(10, 0), time(10, 30)) is True


def test_adjacent_intervals_do_not_overlap():
    assert intervals_overlap(time(10, 0), time(10, 30), time(10, 30), time(11, 0)) is False
    assert intervals_overlap(time(10, 30), time(11, 0), time(10, 0), time(10, 30)) is False


def test_nested_and_identical_intervals_overlap():
    assert intervals_overlap(time(9, 0), time(12, 0), time(10, 0), time(10, 30)) is True
    assert intervals_overlap(time(10, 0), time(10, 30), time(10, 0), time(10, 30)) is True


def test_calendar_dates():
    assert parse_calendar_date("2025-11-08") == date(2025, 11, 8)
    assert parse_calendar_date("2025-11-08T00:00:00") == date(2025, 11, 8)
    with pytest.raises(InvalidTimeFormat):
        parse_calendar_date("08/11/2025")
    # 2025-11-09 is a Sunday, 2025-11-08 a Saturday
    assert day_of_week(date(2025, 11, 9)) == 0
    assert day_of_week(date(2025, 11, 8)) == 6
    assert day_of_week(date(2025, 11, 7)) == 5
