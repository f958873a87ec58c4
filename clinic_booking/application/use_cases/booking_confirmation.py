from __future__ import annotations

import logging
from dataclasses import dataclass

from clinic_booking.application.exceptions import BookingConflictError, BookingServiceError
from clinic_booking.application.ports.booking_service import BookingServicePort
from clinic_booking.domain.entities.appointment import AppointmentRequest, BookingResult
from clinic_booking.domain.entities.booking_selection import BookingSelection


@dataclass(frozen=True)
class ConfirmationOutcome:
    action: str  # "booked", "conflict", "failed"
    message: str | None
    booking: BookingResult | None = None


class BookingConfirmation:
    def __init__(
        self,
        service: BookingServicePort,
        failed_message: str = "Failed to book the appointment.",
        conflict_message: str = "This time was just booked by someone else.",
    ) -> None:
        self._service = service
        self._failed_message = failed_message
        self._conflict_message = conflict_message
        self._logger = logging.getLogger(__name__)

    async def submit(self, selection: BookingSelection) -> ConfirmationOutcome:
        """
        Send the selection to the booking service and classify the response.
        Never raises for service errors; the wizard decides how to recover.
        """
        request = build_appointment_request(selection)
        log_extra = {
            "doctor_id": request.doctor_id,
            "date": request.appointment_date.isoformat(),
            "time": request.appointment_time,
        }

        try:
            booking = await self._service.book_appointment(request)
        except BookingConflictError as e:
            self._logger.warning("Slot already booked", extra={**log_extra, "status_code": e.status_code})
            return ConfirmationOutcome(action="conflict", message=e.server_message or self._conflict_message)
        except BookingServiceError as e:
            self._logger.error(
                "Booking failed",
                extra={**log_extra, "status_code": e.status_code, "error": e.message},
            )
            return ConfirmationOutcome(action="failed", message=e.server_message or self._failed_message)

        self._logger.info("Appointment booked", extra={**log_extra, "booking_id": booking.booking_id})
        return ConfirmationOutcome(action="booked", message=None, booking=booking)


def build_appointment_request(selection: BookingSelection) -> AppointmentRequest:
    details = selection.selected_service_details
    if details is None or selection.selected_date is None or selection.selected_time is None:
        raise ValueError("Service, date and time must be selected before booking")
    return AppointmentRequest(
        doctor_id=selection.doctor_id,
        appointment_date=selection.selected_date,
        appointment_time=selection.selected_time,
        consultation_type=details.type,
    )
