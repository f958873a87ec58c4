from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable

from clinic_booking.application.exceptions import InvalidTimeFormat
from clinic_booking.application.utils.calendar_dates import day_of_week
from clinic_booking.application.utils.time_of_day import parse_time_of_day
from clinic_booking.domain.entities.schedule import ExceptionalDate, OpenInterval, WeeklyScheduleEntry

logger = logging.getLogger(__name__)


class DayStatus(str, Enum):
    DISABLED = "disabled"  # past, or beyond the booking window
    CLOSED = "closed"
    EXCEPTIONAL = "exceptional"  # open with hours from an exception
    AVAILABLE = "available"  # open with weekly hours


@dataclass(frozen=True)
class CalendarDay:
    date: date
    status: DayStatus
    is_available: bool
    has_exception: bool


def find_exception(day: date, exceptions: Iterable[ExceptionalDate]) -> ExceptionalDate | None:
    """First exception recorded for the date, in the order the service returned them."""
    for exception in exceptions:
        if exception.date == day:
            return exception
    return None


def find_weekly_entry(day: date, weekly_schedule: Iterable[WeeklyScheduleEntry]) -> WeeklyScheduleEntry | None:
    weekday = day_of_week(day)
    for entry in weekly_schedule:
        if entry.day_of_week == weekday:
            return entry
    return None


def resolve_availability(
    day: date,
    weekly_schedule: Iterable[WeeklyScheduleEntry],
    exceptions: Iterable[ExceptionalDate],
) -> OpenInterval | None:
    """
    Effective open interval for a date, or None when the doctor is closed.

    An exception for the exact date replaces the weekly entry completely;
    weekly and exceptional hours are never merged.
    """
    exception = find_exception(day, exceptions)
    if exception is not None:
        if exception.is_closed:
            return None
        return _to_interval(day, exception.from_time, exception.to_time, source="exception")

    entry = find_weekly_entry(day, weekly_schedule)
    if entry is None or not entry.is_enabled:
        return None
    return _to_interval(day, entry.from_time, entry.to_time, source="weekly")


def build_booking_calendar(
    today: date,
    weekly_schedule: list[WeeklyScheduleEntry],
    exceptions: list[ExceptionalDate],
    window_days: int = 30,
) -> list[CalendarDay]:
    """Status of every day from today through today + window_days."""
    return [
        describe_day(today + timedelta(days=offset), today, weekly_schedule, exceptions, window_days)
        for offset in range(window_days + 1)
    ]


def describe_day(
    day: date,
    today: date,
    weekly_schedule: list[WeeklyScheduleEntry],
    exceptions: list[ExceptionalDate],
    window_days: int = 30,
) -> CalendarDay:
    if not is_within_booking_window(day, today, window_days):
        return CalendarDay(date=day, status=DayStatus.DISABLED, is_available=False, has_exception=False)

    exception = find_exception(day, exceptions)
    if exception is not None:
        if exception.is_closed:
            return CalendarDay(date=day, status=DayStatus.CLOSED, is_available=False, has_exception=True)
        return CalendarDay(date=day, status=DayStatus.EXCEPTIONAL, is_available=True, has_exception=True)

    entry = find_weekly_entry(day, weekly_schedule)
    if entry is not None and entry.is_enabled:
        return CalendarDay(date=day, status=DayStatus.AVAILABLE, is_available=True, has_exception=False)
    return CalendarDay(date=day, status=DayStatus.CLOSED, is_available=False, has_exception=False)


def is_within_booking_window(day: date, today: date, window_days: int) -> bool:
    return today <= day <= today + timedelta(days=window_days)


def _to_interval(day: date, from_time: str | None, to_time: str | None, source: str) -> OpenInterval | None:
    try:
        return OpenInterval(start=parse_time_of_day(from_time), end=parse_time_of_day(to_time))
    except InvalidTimeFormat as e:
        logger.warning(
            "Unusable opening hours, treating day as closed",
            extra={"date": day.isoformat(), "reason": source, "error": str(e)},
        )
        return None
