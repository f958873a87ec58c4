from __future__ import annotations

import re
from datetime import time
from typing import Any

from clinic_booking.application.exceptions import InvalidTimeFormat

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{1,2})(?::(\d{1,2}))?\s*$")


def parse_time_of_day(text: str | None) -> time:
    """
    Parse "HH:mm" or "HH:mm:ss" into a time of day.
    Seconds are accepted but dropped.
    """
    if text is None:
        raise InvalidTimeFormat("Time value is missing")

    match = _TIME_PATTERN.match(str(text))
    if not match:
        raise InvalidTimeFormat(f"Invalid time format: {text!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    if not (0 <= hours <= 23) or not (0 <= minutes <= 59):
        raise InvalidTimeFormat(f"Time out of range: {text!r}")

    return time(hour=hours, minute=minutes)


def format_time_of_day(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def normalize_time_text(text: str) -> str:
    """Canonical "HH:mm" form of a time string ("9:00:00" -> "09:00")."""
    return format_time_of_day(parse_time_of_day(text))


def intervals_overlap(a_start: Any, a_end: Any, b_start: Any, b_end: Any) -> bool:
    # Half-open intervals: touching ends do not overlap.
    return a_start < b_end and b_start < a_end
