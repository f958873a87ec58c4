from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from clinic_booking.application.dto.booking_payloads import (
    BookedSlotDTO,
    BookingResultDTO,
    ExceptionalDateDTO,
    ServiceCatalogDTO,
    WeeklyScheduleEntryDTO,
    appointment_request_payload,
)
from clinic_booking.application.exceptions import BookingConflictError, BookingServiceError
from clinic_booking.application.ports.booking_service import BookingServicePort
from clinic_booking.application.utils.calendar_dates import format_calendar_date
from clinic_booking.core.config import settings
from clinic_booking.domain.entities.appointment import AppointmentRequest, BookingResult
from clinic_booking.domain.entities.schedule import ExceptionalDate, WeeklyScheduleEntry
from clinic_booking.domain.entities.service_offering import ServiceCatalog
from clinic_booking.domain.entities.slot import BookedSlot


class HttpBookingService(BookingServicePort):
    """
    Booking service adapter for the marketplace REST API.

    Every response is wrapped as {"data": ..., "message": ...}; a missing
    `data` means "nothing" (empty list or empty catalog).
    """

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url or settings.BOOKING_API_BASE_URL
        if not self._base_url and client is None:
            raise ValueError("BOOKING_API_BASE_URL is required for the booking API")

        token = access_token if access_token is not None else settings.BOOKING_API_TOKEN
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=timeout or settings.BOOKING_API_TIMEOUT_SECONDS,
        )
        self._logger = logging.getLogger(__name__)

    async def get_schedule(self, doctor_id: str) -> list[WeeklyScheduleEntry]:
        data = await self._get(f"/Doctors/{doctor_id}/appointments/schedule")
        return [dto.to_entity() for dto in self._parse_list(WeeklyScheduleEntryDTO, data)]

    async def get_exceptions(self, doctor_id: str) -> list[ExceptionalDate]:
        data = await self._get(f"/Doctors/{doctor_id}/appointments/exceptions")
        return [dto.to_entity() for dto in self._parse_list(ExceptionalDateDTO, data)]

    async def get_services(self, doctor_id: str) -> ServiceCatalog:
        data = await self._get(f"/Doctors/{doctor_id}/services")
        if not data:
            return ServiceCatalog()
        return self._parse(ServiceCatalogDTO, data).to_entity()

    async def get_booked_slots(self, doctor_id: str, day: date) -> list[BookedSlot]:
        data = await self._get(
            f"/Doctors/{doctor_id}/appointments/booked",
            params={"date": format_calendar_date(day)},
        )
        return [dto.to_entity() for dto in self._parse_list(BookedSlotDTO, data)]

    async def book_appointment(self, request: AppointmentRequest) -> BookingResult:
        data = await self._request("POST", "/Appointments/book", json=appointment_request_payload(request))
        if not data:
            raise BookingServiceError("Booking response carried no data")
        result = self._parse(BookingResultDTO, data).to_entity()
        self._logger.info(
            "Appointment booked via API",
            extra={"doctor_id": request.doctor_id, "booking_id": result.booking_id},
        )
        return result

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._request("GET", path, params=params)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error(
                "Booking API unreachable",
                extra={"path": path, "error": str(e)},
            )
            raise BookingServiceError(f"Booking API request failed: {e}") from e

        if response.status_code >= 400:
            server_message = _error_message(response)
            self._logger.warning(
                "Booking API error",
                extra={"path": path, "status_code": response.status_code, "error": server_message},
            )
            if response.status_code == 409:
                raise BookingConflictError(
                    f"{method} {path} conflicted",
                    server_message=server_message,
                )
            raise BookingServiceError(
                f"{method} {path} failed with status {response.status_code}",
                status_code=response.status_code,
                server_message=server_message,
            )

        try:
            body = response.json() if response.content else {}
        except ValueError as e:
            raise BookingServiceError(f"{method} {path} returned invalid JSON") from e
        if isinstance(body, dict):
            return body.get("data")
        return None

    def _parse_list(self, model: type[BaseModel], data: Any) -> list[Any]:
        if not data:
            return []
        if not isinstance(data, list):
            raise BookingServiceError(f"Expected a list of {model.__name__}")
        return [self._parse(model, item) for item in data]

    def _parse(self, model: type[BaseModel], data: Any) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise BookingServiceError(f"Invalid {model.__name__} payload: {e}") from e


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("title")
        if message:
            return str(message)
    return None
