from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from clinic_booking.application.exceptions import BookingConflictError, BookingServiceError
from clinic_booking.application.ports.booking_service import BookingServicePort
from clinic_booking.application.utils.time_of_day import intervals_overlap, parse_time_of_day
from clinic_booking.domain.entities.appointment import AppointmentRequest, BookingResult
from clinic_booking.domain.entities.schedule import ExceptionalDate, WeeklyScheduleEntry
from clinic_booking.domain.entities.service_offering import ServiceCatalog, ServiceKind, ServiceOffering
from clinic_booking.domain.entities.slot import BookedSlot


@dataclass
class MockDoctor:
    schedule: list[WeeklyScheduleEntry] = field(default_factory=list)
    exceptions: list[ExceptionalDate] = field(default_factory=list)
    services: ServiceCatalog = field(default_factory=ServiceCatalog)
    booked: dict[date, list[BookedSlot]] = field(default_factory=dict)


def demo_doctor() -> MockDoctor:
    """Open Sunday-Thursday 09:00-17:00 and Saturday 10:00-14:00; closed Friday."""
    schedule = [
        WeeklyScheduleEntry(day_of_week=day, is_enabled=True, from_time="09:00:00", to_time="17:00:00")
        for day in range(0, 5)
    ]
    schedule.append(WeeklyScheduleEntry(day_of_week=5, is_enabled=False))
    schedule.append(WeeklyScheduleEntry(day_of_week=6, is_enabled=True, from_time="10:00", to_time="14:00"))
    services = ServiceCatalog(
        regular_checkup=ServiceOffering(ServiceKind.REGULAR_CHECKUP, Decimal("300"), 30),
        follow_up=ServiceOffering(ServiceKind.FOLLOW_UP, Decimal("150"), 20),
    )
    return MockDoctor(schedule=schedule, services=services)


class MockBookingService(BookingServicePort):
    """
    In-memory booking service. Rejects overlapping bookings with
    BookingConflictError like the real API's 409. `failing` names methods
    that should raise BookingServiceError, for exercising degraded paths.
    """

    def __init__(self, doctors: dict[str, MockDoctor] | None = None) -> None:
        self._doctors = doctors if doctors is not None else {"demo-doctor": demo_doctor()}
        self._bookings: dict[str, BookingResult] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self._logger = logging.getLogger(__name__)

    async def get_schedule(self, doctor_id: str) -> list[WeeklyScheduleEntry]:
        return list(self._doctor("get_schedule", doctor_id).schedule)

    async def get_exceptions(self, doctor_id: str) -> list[ExceptionalDate]:
        return list(self._doctor("get_exceptions", doctor_id).exceptions)

    async def get_services(self, doctor_id: str) -> ServiceCatalog:
        return self._doctor("get_services", doctor_id).services

    async def get_booked_slots(self, doctor_id: str, day: date) -> list[BookedSlot]:
        return list(self._doctor("get_booked_slots", doctor_id).booked.get(day, []))

    async def book_appointment(self, request: AppointmentRequest) -> BookingResult:
        doctor = self._doctor("book_appointment", request.doctor_id)
        offering = next(
            (
                doctor.services.get(kind)
                for kind in ServiceKind
                if kind.consultation_type == request.consultation_type
            ),
            None,
        )
        if offering is None:
            raise BookingServiceError(
                "Unknown consultation type",
                status_code=400,
                server_message="The selected service is not offered by this doctor.",
            )

        start = _minutes(request.appointment_time)
        end = start + offering.duration_minutes
        for slot in doctor.booked.get(request.appointment_date, []):
            slot_start = _minutes(slot.time)
            slot_end = slot_start + (slot.duration_minutes or offering.duration_minutes)
            if intervals_overlap(start, end, slot_start, slot_end):
                raise BookingConflictError(
                    "Slot already booked",
                    server_message="This appointment slot is already booked.",
                )

        booking_id = f"mock_booking_{len(self._bookings) + 1}"
        self.book_slot(
            request.doctor_id,
            request.appointment_date,
            BookedSlot(
                time=request.appointment_time,
                appointment_id=booking_id,
                duration_minutes=offering.duration_minutes,
            ),
        )
        result = BookingResult(
            booking_id=booking_id,
            appointment_date=request.appointment_date,
            appointment_time=request.appointment_time,
            consultation_type=request.consultation_type,
            total_amount=offering.price,
            payment_status="Pending",
        )
        self._bookings[booking_id] = result
        self._logger.info(
            "Mock appointment booked",
            extra={
                "doctor_id": request.doctor_id,
                "date": request.appointment_date.isoformat(),
                "time": request.appointment_time,
                "booking_id": booking_id,
            },
        )
        return result

    def book_slot(self, doctor_id: str, day: date, slot: BookedSlot) -> None:
        """Record a booking made elsewhere (another patient, another channel)."""
        self._doctors[doctor_id].booked.setdefault(day, []).append(slot)

    def _doctor(self, operation: str, doctor_id: str) -> MockDoctor:
        self.calls.append((operation, doctor_id))
        if operation in self.failing:
            raise BookingServiceError(f"{operation} unavailable", status_code=503)
        doctor = self._doctors.get(doctor_id)
        if doctor is None:
            raise BookingServiceError(
                f"Unknown doctor {doctor_id}",
                status_code=404,
                server_message="Doctor not found.",
            )
        return doctor


def _minutes(text: str) -> int:
    value = parse_time_of_day(text)
    return value.hour * 60 + value.minute
