from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class AppointmentRequest:
    doctor_id: str
    appointment_date: date
    appointment_time: str  # "HH:mm"
    consultation_type: int


@dataclass(frozen=True)
class BookingResult:
    booking_id: str
    appointment_date: date
    appointment_time: str
    consultation_type: int
    total_amount: Decimal
    payment_status: str
