"""
Shared test data: a fixed clinic clock and seeded mock doctors.

"Today" is Saturday 2025-11-01 08:00 in the clinic time zone, so every slot
from Monday 2025-11-03 onwards lies in the future.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from clinic_booking.application.use_cases.booking_wizard import BookingWizard
from clinic_booking.domain.entities.booking_selection import DoctorSummary
from clinic_booking.domain.entities.schedule import ExceptionalDate, WeeklyScheduleEntry
from clinic_booking.domain.entities.service_offering import ServiceCatalog, ServiceKind, ServiceOffering
from clinic_booking.infrastructure.booking_api.mock_booking_service import MockBookingService, MockDoctor

CLINIC_TZ = ZoneInfo("Africa/Cairo")
NOW = datetime(2025, 11, 1, 8, 0, tzinfo=CLINIC_TZ)
MONDAY = date(2025, 11, 3)
FRIDAY = date(2025, 11, 7)
SATURDAY = date(2025, 11, 8)


def weekly_schedule() -> list[WeeklyScheduleEntry]:
    """Sunday-Thursday 09:00-17:00; Friday and Saturday closed."""
    entries = [
        WeeklyScheduleEntry(day_of_week=day, is_enabled=True, from_time="09:00:00", to_time="17:00:00")
        for day in range(0, 5)
    ]
    entries.append(WeeklyScheduleEntry(day_of_week=5, is_enabled=False))
    entries.append(WeeklyScheduleEntry(day_of_week=6, is_enabled=False))
    return entries


def make_doctor(**overrides) -> MockDoctor:
    values = {
        "schedule": weekly_schedule(),
        "exceptions": [ExceptionalDate(date=SATURDAY, is_closed=False, from_time="09:00", to_time="13:00")],
        "services": ServiceCatalog(
            regular_checkup=ServiceOffering(ServiceKind.REGULAR_CHECKUP, Decimal("300"), 30),
            follow_up=ServiceOffering(ServiceKind.FOLLOW_UP, Decimal("150"), 20),
        ),
    }
    values.update(overrides)
    return MockDoctor(**values)


def make_wizard(
    service: MockBookingService,
    doctor_id: str = "doc-1",
    refresh_interval_seconds: float = 3600.0,
    clock=None,
) -> BookingWizard:
    return BookingWizard(
        service=service,
        doctor=DoctorSummary(id=doctor_id, full_name="Dr. Test"),
        timezone=CLINIC_TZ,
        clock=clock or (lambda: NOW),
        refresh_interval_seconds=refresh_interval_seconds,
        booking_window_days=30,
    )
