from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BookedSlot:
    time: str  # start of an existing appointment, "HH:mm[:ss]"
    appointment_id: str | None = None
    duration_minutes: int | None = None  # only when the service reports it


@dataclass(frozen=True)
class CandidateSlot:
    time: str  # "HH:mm"
    is_available: bool
    is_booked: bool
    is_past: bool
