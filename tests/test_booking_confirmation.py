from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from clinic_booking.application.exceptions import BookingServiceError
from clinic_booking.application.use_cases.booking_confirmation import (
    BookingConfirmation,
    build_appointment_request,
)
from clinic_booking.domain.entities.booking_selection import BookingSelection, WizardStep
from clinic_booking.domain.entities.service_offering import ServiceDetails, ServiceKind, ServiceOffering
from clinic_booking.domain.entities.slot import BookedSlot

from tests.support import MONDAY


def _selection(time: str = "10:00", kind: ServiceKind = ServiceKind.FOLLOW_UP) -> BookingSelection:
    return BookingSelection(
        doctor_id="doc-1",
        selected_service=kind,
        selected_service_details=ServiceDetails.from_offering(ServiceOffering(kind, Decimal("150"), 20)),
        selected_date=MONDAY,
        selected_time=time,
        current_step=WizardStep.SUMMARY,
    )


def test_request_carries_consultation_type():
    request = build_appointment_request(_selection())
    assert request.doctor_id == "doc-1"
    assert request.appointment_date == date(2025, 11, 3)
    assert request.appointment_time == "10:00"
    assert request.consultation_type == 2


def test_request_requires_complete_selection():
    with pytest.raises(ValueError):
        build_appointment_request(BookingSelection(doctor_id="doc-1"))


@pytest.mark.asyncio
async def test_successful_submit(booking_service):
    outcome = await BookingConfirmation(booking_service).submit(_selection())

    assert outcome.action == "booked"
    assert outcome.message is None
    assert outcome.booking.booking_id == "mock_booking_1"
    assert outcome.booking.total_amount == Decimal("150")
    assert outcome.booking.payment_status == "Pending"


@pytest.mark.asyncio
async def test_conflict_uses_server_message(booking_service):
    booking_service.book_slot("doc-1", MONDAY, BookedSlot(time="10:10"))
    outcome = await BookingConfirmation(booking_service).submit(_selection())

    assert outcome.action == "conflict"
    assert outcome.message == "This appointment slot is already booked."
    assert outcome.booking is None


@pytest.mark.asyncio
async def test_failure_falls_back_to_default_message(booking_service):
    booking_service.failing = {"book_appointment"}
    confirmation = BookingConfirmation(booking_service, failed_message="Try again later.")
    outcome = await confirmation.submit(_selection())

    assert outcome.action == "failed"
    assert outcome.message == "Try again later."


@pytest.mark.asyncio
async def test_failure_prefers_server_message(booking_service):
    async def failing_book(request):
        raise BookingServiceError("bad request", status_code=400, server_message="Invalid appointment date.")

    booking_service.book_appointment = failing_book
    outcome = await BookingConfirmation(booking_service).submit(_selection())

    assert outcome.action == "failed"
    assert outcome.message == "Invalid appointment date."
