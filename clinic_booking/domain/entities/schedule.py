from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time


@dataclass(frozen=True)
class WeeklyScheduleEntry:
    day_of_week: int  # 0=Sunday .. 6=Saturday
    is_enabled: bool
    from_time: str | None = None  # "HH:mm" or "HH:mm:ss", as sent by the schedule service
    to_time: str | None = None


@dataclass(frozen=True)
class ExceptionalDate:
    date: date
    is_closed: bool
    from_time: str | None = None
    to_time: str | None = None


@dataclass(frozen=True)
class OpenInterval:
    start: time
    end: time  # exclusive
