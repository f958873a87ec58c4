from __future__ import annotations

import pytest

from clinic_booking.infrastructure.booking_api.mock_booking_service import MockBookingService

from tests.support import make_doctor


@pytest.fixture
def booking_service() -> MockBookingService:
    return MockBookingService({"doc-1": make_doctor()})
