from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from clinic_booking.core.config import settings
from clinic_booking.application.ports.booking_service import BookingServicePort
from clinic_booking.application.use_cases.booking_wizard import BookingWizard, WizardMessages
from clinic_booking.domain.entities.booking_selection import DoctorSummary
from clinic_booking.infrastructure.booking_api.http_booking_service import HttpBookingService
from clinic_booking.infrastructure.booking_api.mock_booking_service import MockBookingService
from clinic_booking.infrastructure.store.memory_store import MemoryWizardStore


_wizard_store: MemoryWizardStore | None = None


@lru_cache
def get_booking_service() -> BookingServicePort:
    logger = logging.getLogger(__name__)
    if not settings.BOOKING_API_BASE_URL or settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using MockBookingService (ENV=%s)", settings.ENV)
        return MockBookingService()
    logger.info("Using HttpBookingService base_url=%s", settings.BOOKING_API_BASE_URL)
    return HttpBookingService()


def get_wizard_store() -> MemoryWizardStore:
    global _wizard_store
    if _wizard_store is None:
        _wizard_store = MemoryWizardStore(idle_timeout_seconds=settings.SESSION_IDLE_TIMEOUT_SECONDS)
    return _wizard_store


def get_clinic_timezone() -> ZoneInfo:
    return ZoneInfo(settings.CLINIC_TIMEZONE)


def get_wizard_messages() -> WizardMessages:
    return WizardMessages(
        booking_failed=settings.BOOKING_FAILED_MESSAGE,
        booking_conflict=settings.BOOKING_CONFLICT_MESSAGE,
        load_failed=settings.AVAILABILITY_LOAD_FAILED_MESSAGE,
        date_out_of_window=settings.DATE_OUT_OF_WINDOW_MESSAGE,
    )


def build_booking_wizard(doctor: DoctorSummary) -> BookingWizard:
    return BookingWizard(
        service=get_booking_service(),
        doctor=doctor,
        timezone=get_clinic_timezone(),
        refresh_interval_seconds=settings.SLOT_REFRESH_INTERVAL_SECONDS,
        booking_window_days=settings.BOOKING_WINDOW_DAYS,
        messages=get_wizard_messages(),
    )
