from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from clinic_booking.application.exceptions import InvalidTimeFormat
from clinic_booking.application.utils.time_of_day import (
    format_time_of_day,
    intervals_overlap,
    parse_time_of_day,
)
from clinic_booking.domain.entities.schedule import OpenInterval
from clinic_booking.domain.entities.slot import BookedSlot, CandidateSlot

logger = logging.getLogger(__name__)


def generate_candidate_slots(
    interval: OpenInterval | None,
    duration_minutes: int,
    booked_slots: Iterable[BookedSlot],
    now: datetime,
    day: date,
) -> list[CandidateSlot]:
    """
    Fixed-length candidate slots for one date, in ascending order.

    A candidate is emitted for every cursor position before the closing time,
    so the last slot may run past it. A candidate is booked when its interval
    overlaps any booked interval; booked intervals use the booked slot's own
    duration when known, otherwise the selected service's duration. A
    candidate that starts before `now` is past. Naive `now` values are
    compared with naive slot datetimes; aware ones in `now`'s time zone.
    """
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")
    if interval is None:
        return []

    tz = now.tzinfo
    step = timedelta(minutes=duration_minutes)
    booked = _booked_intervals(booked_slots, day, step, tz)

    cursor = _at(day, interval.start, tz)
    end = _at(day, interval.end, tz)
    slots: list[CandidateSlot] = []
    while cursor < end:
        slot_end = cursor + step
        is_booked = any(intervals_overlap(cursor, slot_end, b_start, b_end) for b_start, b_end in booked)
        is_past = cursor < now
        slots.append(
            CandidateSlot(
                time=format_time_of_day(cursor.time()),
                is_available=not is_booked and not is_past,
                is_booked=is_booked,
                is_past=is_past,
            )
        )
        cursor = slot_end

    logger.debug(
        "Generated candidate slots",
        extra={
            "date": day.isoformat(),
            "total": len(slots),
            "available": sum(1 for s in slots if s.is_available),
            "booked": sum(1 for s in slots if s.is_booked),
        },
    )
    return slots


def _booked_intervals(
    booked_slots: Iterable[BookedSlot],
    day: date,
    default_step: timedelta,
    tz: tzinfo | None,
) -> list[tuple[datetime, datetime]]:
    intervals: list[tuple[datetime, datetime]] = []
    for slot in booked_slots:
        try:
            start = _at(day, parse_time_of_day(slot.time), tz)
        except InvalidTimeFormat as e:
            logger.warning(
                "Ignoring booked slot with unparseable time",
                extra={"date": day.isoformat(), "time": slot.time, "error": str(e)},
            )
            continue
        length = timedelta(minutes=slot.duration_minutes) if slot.duration_minutes else default_step
        intervals.append((start, start + length))
    return intervals


def _at(day: date, value, tz: tzinfo | None) -> datetime:
    return datetime.combine(day, value, tzinfo=tz)
