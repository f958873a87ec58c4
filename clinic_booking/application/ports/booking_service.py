from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from clinic_booking.domain.entities.appointment import AppointmentRequest, BookingResult
from clinic_booking.domain.entities.schedule import ExceptionalDate, WeeklyScheduleEntry
from clinic_booking.domain.entities.service_offering import ServiceCatalog
from clinic_booking.domain.entities.slot import BookedSlot


class BookingServicePort(ABC):
    @abstractmethod
    async def get_schedule(self, doctor_id: str) -> list[WeeklyScheduleEntry]:
        """Get the doctor's recurring weekly schedule."""
        raise NotImplementedError

    @abstractmethod
    async def get_exceptions(self, doctor_id: str) -> list[ExceptionalDate]:
        """Get date-specific overrides of the weekly schedule."""
        raise NotImplementedError

    @abstractmethod
    async def get_services(self, doctor_id: str) -> ServiceCatalog:
        """Get the consultation kinds the doctor offers, with price and duration."""
        raise NotImplementedError

    @abstractmethod
    async def get_booked_slots(self, doctor_id: str, day: date) -> list[BookedSlot]:
        """Get start times already booked with the doctor on a date."""
        raise NotImplementedError

    @abstractmethod
    async def book_appointment(self, request: AppointmentRequest) -> BookingResult:
        """Book an appointment. Raises BookingConflictError if the slot was taken."""
        raise NotImplementedError
