from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from clinic_booking.application.use_cases.availability import DayStatus
from clinic_booking.domain.entities.service_offering import ServiceKind


class OpenSessionRequestSchema(BaseModel):
    doctor_id: str = Field(min_length=1)
    doctor_name: str | None = None
    specialty: str | None = None
    image_url: str | None = None


class SelectServiceRequestSchema(BaseModel):
    kind: ServiceKind


class SelectDateRequestSchema(BaseModel):
    date: str  # YYYY-MM-DD


class SelectTimeRequestSchema(BaseModel):
    time: str  # HH:mm


class GoToStepRequestSchema(BaseModel):
    step: int = Field(ge=1, le=6)


class ServiceDetailsSchema(BaseModel):
    type: int
    name: str
    price: Decimal
    duration: int


class ServiceOfferingSchema(BaseModel):
    kind: ServiceKind
    name: str
    price: Decimal
    duration: int


class CandidateSlotSchema(BaseModel):
    time: str
    is_available: bool
    is_booked: bool
    is_past: bool


class BookingResultSchema(BaseModel):
    booking_id: str
    appointment_date: date
    appointment_time: str
    consultation_type: int
    total_amount: Decimal
    payment_status: str


class DoctorSchema(BaseModel):
    id: str
    full_name: str | None = None
    specialty: str | None = None
    image_url: str | None = None


class WizardViewSchema(BaseModel):
    session_id: str
    doctor: DoctorSchema
    current_step: int
    is_ready: bool
    loading: bool
    error: str | None = None
    services: list[ServiceOfferingSchema] = Field(default_factory=list)
    selected_service: ServiceKind | None = None
    selected_service_details: ServiceDetailsSchema | None = None
    selected_date: date | None = None
    selected_time: str | None = None
    slots: list[CandidateSlotSchema] = Field(default_factory=list)
    available_count: int = 0
    booked_count: int = 0
    is_refreshing: bool = False
    booking_result: BookingResultSchema | None = None


class SelectionResponseSchema(BaseModel):
    accepted: bool
    wizard: WizardViewSchema


class CalendarDaySchema(BaseModel):
    date: date
    status: DayStatus
    is_available: bool
    has_exception: bool


class CalendarResponseSchema(BaseModel):
    session_id: str
    days: list[CalendarDaySchema]
