"""
Tests for resolving a date's opening hours and the booking-window calendar.
"""

from __future__ import annotations

from datetime import date, time, timedelta

from clinic_booking.application.use_cases.availability import (
    DayStatus,
    build_booking_calendar,
    resolve_availability,
)
from clinic_booking.domain.entities.schedule import ExceptionalDate, OpenInterval, WeeklyScheduleEntry

from tests.support import FRIDAY, MONDAY, SATURDAY, weekly_schedule


def test_weekly_hours_used_without_exception():
    interval = resolve_availability(MONDAY, weekly_schedule(), [])
    assert interval == OpenInterval(start=time(9, 0), end=time(17, 0))


def test_disabled_weekday_is_closed():
    assert resolve_availability(FRIDAY, weekly_schedule(), []) is None


def test_missing_weekly_entry_is_closed():
    schedule = [entry for entry in weekly_schedule() if entry.day_of_week != 1]
    assert resolve_availability(MONDAY, schedule, []) is None


def test_closed_exception_wins_over_open_weekday():
    exceptions = [ExceptionalDate(date=MONDAY, is_closed=True)]
    assert resolve_availability(MONDAY, weekly_schedule(), exceptions) is None


def test_open_exception_replaces_weekly_hours():
    exceptions = [ExceptionalDate(date=MONDAY, is_closed=False, from_time="12:00", to_time="14:00")]
    interval = resolve_availability(MONDAY, weekly_schedule(), exceptions)
    assert interval == OpenInterval(start=time(12, 0), end=time(14, 0))


def test_open_exception_opens_a_disabled_weekday():
    """Friday and Saturday are disabled weekly; the Saturday exception opens it."""
    exceptions = [ExceptionalDate(date=SATURDAY, is_closed=False, from_time="09:00", to_time="13:00")]
    assert resolve_availability(FRIDAY, weekly_schedule(), exceptions) is None
    assert resolve_availability(SATURDAY, weekly_schedule(), exceptions) == OpenInterval(time(9, 0), time(13, 0))


def test_first_duplicate_exception_wins():
    exceptions = [
        ExceptionalDate(date=MONDAY, is_closed=False, from_time="10:00", to_time="11:00"),
        ExceptionalDate(date=MONDAY, is_closed=True),
    ]
    assert resolve_availability(MONDAY, weekly_schedule(), exceptions) == OpenInterval(time(10, 0), time(11, 0))


def test_unparseable_hours_render_day_closed():
    schedule = [WeeklyScheduleEntry(day_of_week=1, is_enabled=True, from_time="9am", to_time="17:00")]
    assert resolve_availability(MONDAY, schedule, []) is None

    exceptions = [ExceptionalDate(date=MONDAY, is_closed=False, from_time=None, to_time=None)]
    assert resolve_availability(MONDAY, weekly_schedule(), exceptions) is None


def test_booking_calendar_statuses():
    today = date(2025, 11, 1)
    exceptions = [
        ExceptionalDate(date=SATURDAY, is_closed=False, from_time="09:00", to_time="13:00"),
        ExceptionalDate(date=date(2025, 11, 4), is_closed=True),
    ]
    days = {day.date: day for day in build_booking_calendar(today, weekly_schedule(), exceptions, window_days=30)}

    assert len(days) == 31
    assert days[MONDAY].status == DayStatus.AVAILABLE
    assert days[MONDAY].is_available is True
    assert days[FRIDAY].status == DayStatus.CLOSED
    assert days[SATURDAY].status == DayStatus.EXCEPTIONAL
    assert days[SATURDAY].has_exception is True
    assert days[date(2025, 11, 4)].status == DayStatus.CLOSED
    assert days[date(2025, 11, 4)].has_exception is True
    assert today + timedelta(days=31) not in days
