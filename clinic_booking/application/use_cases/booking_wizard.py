from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from typing import Callable

from clinic_booking.application.exceptions import (
    BookingServiceError,
    ServiceNotOfferedError,
    WizardNotReadyError,
    WizardStepError,
)
from clinic_booking.application.ports.booking_service import BookingServicePort
from clinic_booking.application.use_cases.availability import (
    CalendarDay,
    build_booking_calendar,
    is_within_booking_window,
    resolve_availability,
)
from clinic_booking.application.use_cases.booking_confirmation import BookingConfirmation
from clinic_booking.application.use_cases.slot_generator import generate_candidate_slots
from clinic_booking.application.use_cases.slot_refresh import SlotRefreshSession
from clinic_booking.application.utils.time_of_day import normalize_time_text
from clinic_booking.domain.entities.appointment import BookingResult
from clinic_booking.domain.entities.booking_selection import BookingSelection, DoctorSummary, WizardStep
from clinic_booking.domain.entities.schedule import ExceptionalDate, WeeklyScheduleEntry
from clinic_booking.domain.entities.service_offering import ServiceCatalog, ServiceDetails, ServiceKind
from clinic_booking.domain.entities.slot import BookedSlot, CandidateSlot


@dataclass(frozen=True)
class WizardMessages:
    booking_failed: str = "Failed to book the appointment."
    booking_conflict: str = "This time was just booked by someone else. Available times have been refreshed."
    load_failed: str = "Failed to load the doctor's availability."
    date_out_of_window: str = "Please choose a date within the booking window."


class BookingWizard:
    """
    Six-step booking flow for one doctor:
    service -> date -> time -> summary -> payment -> success.

    One instance per open wizard. `open()` loads the doctor's schedule data,
    `close()` disposes it. While the user is on time selection a
    SlotRefreshSession re-fetches booked slots so slots taken by other
    patients drop out of the candidate list.
    """

    def __init__(
        self,
        service: BookingServicePort,
        doctor: DoctorSummary,
        timezone: tzinfo,
        clock: Callable[[], datetime] | None = None,
        refresh_interval_seconds: float = 30.0,
        booking_window_days: int = 30,
        messages: WizardMessages | None = None,
    ) -> None:
        self._service = service
        self.doctor = doctor
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(timezone))
        self._window_days = booking_window_days
        self._messages = messages or WizardMessages()
        self._confirmation = BookingConfirmation(
            service,
            failed_message=self._messages.booking_failed,
            conflict_message=self._messages.booking_conflict,
        )
        self._refresh = SlotRefreshSession(
            self._refresh_booked_slots,
            interval_seconds=refresh_interval_seconds,
            name=f"slot-refresh:{doctor.id}",
        )
        self._logger = logging.getLogger(__name__)

        self.selection = BookingSelection(doctor_id=doctor.id)
        self.weekly_schedule: list[WeeklyScheduleEntry] = []
        self.exceptions: list[ExceptionalDate] = []
        self.services: ServiceCatalog | None = None
        self.booked_slots: list[BookedSlot] = []
        self.candidate_slots: list[CandidateSlot] = []
        self.booking_result: BookingResult | None = None
        self.error: str | None = None
        self.loading = False
        self.is_ready = False
        self._fetch_generation = 0
        self._confirming = False

    @property
    def current_step(self) -> WizardStep:
        return self.selection.current_step

    @property
    def is_refreshing(self) -> bool:
        return self._refresh.running

    # Lifecycle

    async def open(self) -> None:
        """Start from step 1 and load schedule, exceptions and services."""
        await self._refresh.stop()
        self._clear_session()
        self.is_ready = False
        self.loading = True
        try:
            schedule, exceptions, services = await asyncio.gather(
                self._service.get_schedule(self.doctor.id),
                self._service.get_exceptions(self.doctor.id),
                self._service.get_services(self.doctor.id),
            )
        except BookingServiceError as e:
            self._logger.error(
                "Failed to load doctor availability",
                extra={"doctor_id": self.doctor.id, "status_code": e.status_code, "error": e.message},
            )
            self.error = e.server_message or self._messages.load_failed
            return
        finally:
            self.loading = False

        self.weekly_schedule = list(schedule)
        self.exceptions = list(exceptions)
        self.services = services
        self.is_ready = True
        self._logger.info(
            "Booking wizard opened",
            extra={
                "doctor_id": self.doctor.id,
                "schedule_days": len(self.weekly_schedule),
                "exceptions": len(self.exceptions),
            },
        )

    async def close(self) -> None:
        await self._refresh.stop()
        self._clear_session()
        self.weekly_schedule = []
        self.exceptions = []
        self.services = None
        self.is_ready = False
        self._logger.info("Booking wizard closed", extra={"doctor_id": self.doctor.id})

    async def reset_booking(self) -> None:
        """Back to step 1 with an empty selection; loaded schedule data is kept."""
        self._require_no_confirmation()
        await self._refresh.stop()
        self._clear_session()

    def clear_error(self) -> None:
        self.error = None

    # Step actions

    async def select_service(self, kind: ServiceKind | str) -> None:
        self._require_ready()
        self._require_step(WizardStep.SELECT_SERVICE)

        kind = ServiceKind(kind)
        offering = self.services.get(kind) if self.services else None
        if offering is None:
            raise ServiceNotOfferedError(f"Doctor does not offer {kind.value}")

        details = ServiceDetails.from_offering(offering)
        changed = details != self.selection.selected_service_details
        self.selection = replace(
            self.selection,
            selected_service=kind,
            selected_service_details=details,
            selected_time=None if changed else self.selection.selected_time,
        )
        if changed:
            self._regenerate()
        self.error = None
        await self._set_step(WizardStep.SELECT_DATE)

    async def select_date(self, day: date) -> bool:
        """
        Fetch booked slots for the date, rebuild candidates and move to time
        selection. Returns False without changing anything when the date is
        outside the booking window.
        """
        self._require_ready()
        self._require_step(WizardStep.SELECT_DATE, WizardStep.SELECT_TIME)

        if not is_within_booking_window(day, self._now().date(), self._window_days):
            self._logger.info(
                "Rejected date outside booking window",
                extra={"doctor_id": self.doctor.id, "date": day.isoformat()},
            )
            self.error = self._messages.date_out_of_window
            return False

        if day != self.selection.selected_date:
            self.selection = replace(self.selection, selected_date=day, selected_time=None)
            self.booked_slots = []
        self.error = None
        await self._enter_time_selection()
        return True

    async def select_time(self, time_text: str) -> bool:
        """
        Pick a candidate slot. Only an available candidate advances to the
        summary; anything else leaves the wizard untouched and returns False.
        """
        self._require_ready()
        self._require_step(WizardStep.SELECT_TIME)

        value = normalize_time_text(time_text)
        slot = self._find_candidate(value)
        if slot is None or not slot.is_available:
            self._logger.info(
                "Ignored selection of unavailable slot",
                extra={"doctor_id": self.doctor.id, "time": value},
            )
            return False

        self.selection = replace(self.selection, selected_time=value)
        self.error = None
        await self._set_step(WizardStep.SUMMARY)
        return True

    async def confirm_booking(self) -> BookingResult | None:
        """
        Submit the selection. On success the result is stored and the wizard
        moves to payment. On a conflict the booked slots are re-fetched; if the
        chosen time is gone the user is sent back to time selection. Other
        failures leave the wizard on the summary with an error message.
        """
        self._require_ready()
        self._require_step(WizardStep.SUMMARY)
        self._require_no_confirmation()

        self._confirming = True
        self.loading = True
        self.error = None
        try:
            outcome = await self._confirmation.submit(self.selection)
        finally:
            self._confirming = False
            self.loading = False

        # The wizard may have been closed while the request was in flight.
        if not self.is_ready or self.selection.current_step != WizardStep.SUMMARY or self.booking_result is not None:
            self._logger.warning(
                "Discarded confirmation outcome for a wizard that moved on",
                extra={"doctor_id": self.doctor.id, "reason": outcome.action},
            )
            return None

        if outcome.action == "booked":
            self.booking_result = outcome.booking
            await self._set_step(WizardStep.PAYMENT)
            return outcome.booking

        self.error = outcome.message
        if outcome.action == "conflict":
            await self._recover_from_conflict()
        return None

    async def complete_payment(self) -> None:
        self._require_step(WizardStep.PAYMENT)
        await self._set_step(WizardStep.SUCCESS)

    async def go_to_step(self, step: WizardStep | int) -> None:
        """
        Navigate between steps. Going back keeps the selection; only what the
        user changes on the revisited step invalidates later choices. Going
        forward requires the target step's prerequisites.
        """
        self._require_ready()
        self._require_no_confirmation()
        target = WizardStep(step)
        current = self.selection.current_step
        if target == current:
            return

        if target < current:
            if self.booking_result is not None:
                raise WizardStepError("Booking is already confirmed")
        else:
            self._check_forward(current, target)

        if target == WizardStep.SELECT_TIME:
            await self._enter_time_selection()
        elif target == WizardStep.SUCCESS:
            await self.complete_payment()
        else:
            await self._set_step(target)

    def booking_calendar(self, today: date | None = None) -> list[CalendarDay]:
        return build_booking_calendar(
            today or self._now().date(),
            self.weekly_schedule,
            self.exceptions,
            self._window_days,
        )

    # Internals

    def _check_forward(self, current: WizardStep, target: WizardStep) -> None:
        selection = self.selection
        if target >= WizardStep.SELECT_DATE and selection.selected_service_details is None:
            raise WizardStepError("Select a service first")
        if target >= WizardStep.SELECT_TIME and selection.selected_date is None:
            raise WizardStepError("Select a date first")
        if target == WizardStep.SUMMARY:
            if current != WizardStep.SELECT_TIME:
                raise WizardStepError("Review the available times first")
            if selection.selected_time is None or not self._selected_time_available():
                raise WizardStepError("Select an available time first")
        if target == WizardStep.PAYMENT:
            raise WizardStepError("Confirm the booking to continue to payment")
        if target == WizardStep.SUCCESS and current != WizardStep.PAYMENT:
            raise WizardStepError("Payment is not completed")

    async def _enter_time_selection(self) -> None:
        day = self.selection.selected_date
        await self._refresh.stop()
        self.candidate_slots = []
        self.loading = True
        try:
            await self._load_booked_slots(day, keep_current=False)
        finally:
            self.loading = False
        self._regenerate()
        if self.selection.selected_time is not None and not self._selected_time_available():
            self.selection = replace(self.selection, selected_time=None)
        await self._set_step(WizardStep.SELECT_TIME)

    async def _recover_from_conflict(self) -> None:
        day = self.selection.selected_date
        await self._load_booked_slots(day, keep_current=True)
        self._regenerate()
        if self._selected_time_available():
            return
        self.selection = replace(self.selection, selected_time=None)
        await self._set_step(WizardStep.SELECT_TIME)

    async def _refresh_booked_slots(self) -> None:
        day = self.selection.selected_date
        if day is None or self.selection.current_step != WizardStep.SELECT_TIME:
            return
        if await self._load_booked_slots(day, keep_current=True):
            self._regenerate()

    async def _load_booked_slots(self, day: date, keep_current: bool) -> bool:
        """
        Fetch booked slots for `day`. Returns True when the response was
        applied. A response for a superseded request, or for a date the user
        has left, is dropped.
        """
        self._fetch_generation += 1
        generation = self._fetch_generation
        try:
            slots = await self._service.get_booked_slots(self.doctor.id, day)
        except BookingServiceError as e:
            self._logger.warning(
                "Failed to fetch booked slots",
                extra={
                    "doctor_id": self.doctor.id,
                    "date": day.isoformat(),
                    "status_code": e.status_code,
                    "error": e.message,
                },
            )
            if keep_current:
                return False
            slots = []

        if generation != self._fetch_generation or day != self.selection.selected_date:
            self._logger.debug(
                "Discarded stale booked slots",
                extra={"doctor_id": self.doctor.id, "date": day.isoformat()},
            )
            return False

        self.booked_slots = list(slots)
        return True

    def _regenerate(self) -> None:
        details = self.selection.selected_service_details
        day = self.selection.selected_date
        if details is None or day is None:
            self.candidate_slots = []
            return
        interval = resolve_availability(day, self.weekly_schedule, self.exceptions)
        self.candidate_slots = generate_candidate_slots(
            interval,
            details.duration,
            self.booked_slots,
            self._now(),
            day,
        )

    async def _set_step(self, step: WizardStep) -> None:
        if step != self.selection.current_step:
            self._logger.debug(
                "Wizard step changed",
                extra={"doctor_id": self.doctor.id, "step": int(step)},
            )
        self.selection = replace(self.selection, current_step=step)
        if step == WizardStep.SELECT_TIME and self.selection.selected_date is not None:
            self._refresh.start()
        else:
            await self._refresh.stop()

    def _find_candidate(self, value: str) -> CandidateSlot | None:
        for slot in self.candidate_slots:
            if slot.time == value:
                return slot
        return None

    def _selected_time_available(self) -> bool:
        selected = self.selection.selected_time
        slot = self._find_candidate(selected) if selected else None
        return slot is not None and slot.is_available

    def _clear_session(self) -> None:
        self._fetch_generation += 1
        self.selection = BookingSelection(doctor_id=self.doctor.id)
        self.booked_slots = []
        self.candidate_slots = []
        self.booking_result = None
        self.error = None
        self.loading = False

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise WizardNotReadyError(self.error or self._messages.load_failed)

    def _require_step(self, *allowed: WizardStep) -> None:
        if self.selection.current_step not in allowed:
            raise WizardStepError(
                f"Action not allowed on step {int(self.selection.current_step)}"
            )

    def _require_no_confirmation(self) -> None:
        if self._confirming:
            raise WizardStepError("A booking confirmation is already in progress")

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is not None:
            return now.astimezone(self._timezone)
        return now
