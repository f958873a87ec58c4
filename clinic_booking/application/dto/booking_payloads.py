from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from clinic_booking.application.exceptions import InvalidTimeFormat
from clinic_booking.application.utils.calendar_dates import format_calendar_date, parse_calendar_date
from clinic_booking.application.utils.time_of_day import normalize_time_text, parse_time_of_day
from clinic_booking.domain.entities.appointment import AppointmentRequest, BookingResult
from clinic_booking.domain.entities.schedule import ExceptionalDate, WeeklyScheduleEntry
from clinic_booking.domain.entities.service_offering import ServiceCatalog, ServiceKind, ServiceOffering
from clinic_booking.domain.entities.slot import BookedSlot


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WeeklyScheduleEntryDTO(_Payload):
    day_of_week: int = Field(alias="dayOfWeek", ge=0, le=6)
    is_enabled: bool = Field(default=False, alias="isEnabled")
    from_time: str | None = Field(default=None, alias="fromTime")
    to_time: str | None = Field(default=None, alias="toTime")

    def to_entity(self) -> WeeklyScheduleEntry:
        return WeeklyScheduleEntry(
            day_of_week=self.day_of_week,
            is_enabled=self.is_enabled,
            from_time=self.from_time,
            to_time=self.to_time,
        )


class ExceptionalDateDTO(_Payload):
    exception_date: date = Field(alias="date")
    is_closed: bool = Field(default=False, alias="isClosed")
    from_time: str | None = Field(default=None, alias="fromTime")
    to_time: str | None = Field(default=None, alias="toTime")

    @field_validator("exception_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_calendar_date(value)
        return value

    def to_entity(self) -> ExceptionalDate:
        return ExceptionalDate(
            date=self.exception_date,
            is_closed=self.is_closed,
            from_time=self.from_time,
            to_time=self.to_time,
        )


class ServiceOfferingDTO(_Payload):
    price: Decimal = Decimal("0")
    duration: int = Field(gt=0)


class ServiceCatalogDTO(_Payload):
    regular_checkup: ServiceOfferingDTO | None = Field(default=None, alias="regularCheckup")
    re_examination: ServiceOfferingDTO | None = Field(default=None, alias="reExamination")

    def to_entity(self) -> ServiceCatalog:
        return ServiceCatalog(
            regular_checkup=_offering(ServiceKind.REGULAR_CHECKUP, self.regular_checkup),
            follow_up=_offering(ServiceKind.FOLLOW_UP, self.re_examination),
        )


class BookedSlotDTO(_Payload):
    time: str
    appointment_id: str | int | None = Field(default=None, alias="appointmentId")
    end_time: str | None = Field(default=None, alias="endTime")
    duration: int | None = None

    def to_entity(self) -> BookedSlot:
        return BookedSlot(
            time=self.time,
            appointment_id=str(self.appointment_id) if self.appointment_id is not None else None,
            duration_minutes=self._duration_minutes(),
        )

    def _duration_minutes(self) -> int | None:
        if self.duration and self.duration > 0:
            return self.duration
        if not self.end_time:
            return None
        try:
            start = parse_time_of_day(self.time)
            end = parse_time_of_day(self.end_time)
        except InvalidTimeFormat:
            return None
        minutes = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
        return minutes if minutes > 0 else None


class BookingResultDTO(_Payload):
    booking_id: str | int = Field(validation_alias=AliasChoices("id", "bookingId", "appointmentId", "booking_id"))
    appointment_date: date = Field(alias="appointmentDate")
    appointment_time: str = Field(alias="appointmentTime")
    consultation_type: int = Field(alias="consultationType")
    total_amount: Decimal = Field(default=Decimal("0"), alias="totalAmount")
    payment_status: str = Field(default="Pending", alias="paymentStatus")

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_calendar_date(value)
        return value

    @field_validator("appointment_time")
    @classmethod
    def _normalize_time(cls, value: str) -> str:
        return normalize_time_text(value)

    def to_entity(self) -> BookingResult:
        return BookingResult(
            booking_id=str(self.booking_id),
            appointment_date=self.appointment_date,
            appointment_time=self.appointment_time,
            consultation_type=self.consultation_type,
            total_amount=self.total_amount,
            payment_status=self.payment_status,
        )


def appointment_request_payload(request: AppointmentRequest) -> dict[str, Any]:
    return {
        "doctorId": request.doctor_id,
        "appointmentDate": format_calendar_date(request.appointment_date),
        "appointmentTime": request.appointment_time,
        "consultationType": request.consultation_type,
    }


def _offering(kind: ServiceKind, dto: ServiceOfferingDTO | None) -> ServiceOffering | None:
    if dto is None:
        return None
    return ServiceOffering(kind=kind, price=dto.price, duration_minutes=dto.duration)
