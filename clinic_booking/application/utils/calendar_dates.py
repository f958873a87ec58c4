from __future__ import annotations

from datetime import date

from clinic_booking.application.exceptions import InvalidTimeFormat


def parse_calendar_date(text: str | None) -> date:
    """
    Parse "YYYY-MM-DD". A trailing ISO time part ("2025-11-08T00:00:00")
    is tolerated and dropped.
    """
    if not text:
        raise InvalidTimeFormat("Date value is missing")
    value = str(text).strip()
    if "T" in value:
        value = value.split("T", 1)[0]
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidTimeFormat(f"Invalid date format: {text!r}") from e


def format_calendar_date(value: date) -> str:
    return value.isoformat()


def day_of_week(value: date) -> int:
    """Day of week with 0=Sunday .. 6=Saturday."""
    return (value.weekday() + 1) % 7
