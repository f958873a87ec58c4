from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import IntEnum

from clinic_booking.domain.entities.service_offering import ServiceDetails, ServiceKind


class WizardStep(IntEnum):
    SELECT_SERVICE = 1
    SELECT_DATE = 2
    SELECT_TIME = 3
    SUMMARY = 4
    PAYMENT = 5
    SUCCESS = 6


@dataclass(frozen=True)
class DoctorSummary:
    id: str
    full_name: str | None = None
    specialty: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class BookingSelection:
    doctor_id: str
    selected_service: ServiceKind | None = None
    selected_service_details: ServiceDetails | None = None
    selected_date: date | None = None
    selected_time: str | None = None  # "HH:mm"
    current_step: WizardStep = WizardStep.SELECT_SERVICE
