from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Response

from clinic_booking.api.v1.schemas import (
    BookingResultSchema,
    CalendarDaySchema,
    CalendarResponseSchema,
    CandidateSlotSchema,
    DoctorSchema,
    GoToStepRequestSchema,
    OpenSessionRequestSchema,
    SelectDateRequestSchema,
    SelectionResponseSchema,
    SelectServiceRequestSchema,
    SelectTimeRequestSchema,
    ServiceDetailsSchema,
    ServiceOfferingSchema,
    WizardViewSchema,
)
from clinic_booking.application.exceptions import (
    InvalidTimeFormat,
    ServiceNotOfferedError,
    WizardError,
)
from clinic_booking.application.ports.wizard_store import WizardStorePort
from clinic_booking.application.use_cases.booking_wizard import BookingWizard
from clinic_booking.application.use_cases.session_cleanup import close_idle_sessions
from clinic_booking.application.utils.calendar_dates import parse_calendar_date
from clinic_booking.domain.entities.booking_selection import DoctorSummary, WizardStep
from clinic_booking.wiring.dependencies import build_booking_wizard, get_wizard_store

router = APIRouter()
logger = logging.getLogger(__name__)


def get_wizard_factory() -> Callable[[DoctorSummary], BookingWizard]:
    return build_booking_wizard


def _get_wizard(session_id: str, store: WizardStorePort) -> BookingWizard:
    wizard = store.get(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Booking session not found")
    return wizard


def _view(session_id: str, wizard: BookingWizard) -> WizardViewSchema:
    selection = wizard.selection
    details = selection.selected_service_details
    services = []
    if wizard.services is not None:
        for kind in wizard.services.offered_kinds():
            offering = wizard.services.get(kind)
            services.append(
                ServiceOfferingSchema(
                    kind=kind,
                    name=kind.display_name,
                    price=offering.price,
                    duration=offering.duration_minutes,
                )
            )

    return WizardViewSchema(
        session_id=session_id,
        doctor=DoctorSchema(**asdict(wizard.doctor)),
        current_step=int(selection.current_step),
        is_ready=wizard.is_ready,
        loading=wizard.loading,
        error=wizard.error,
        services=services,
        selected_service=selection.selected_service,
        selected_service_details=ServiceDetailsSchema(**asdict(details)) if details else None,
        selected_date=selection.selected_date,
        selected_time=selection.selected_time,
        slots=[CandidateSlotSchema(**asdict(slot)) for slot in wizard.candidate_slots],
        available_count=sum(1 for slot in wizard.candidate_slots if slot.is_available),
        booked_count=sum(1 for slot in wizard.candidate_slots if slot.is_booked),
        is_refreshing=wizard.is_refreshing,
        booking_result=(
            BookingResultSchema(**asdict(wizard.booking_result)) if wizard.booking_result else None
        ),
    )


async def _finish_if_completed(session_id: str, wizard: BookingWizard, store: WizardStorePort) -> WizardViewSchema:
    """A wizard that reached the success step is rendered once more, then discarded."""
    view = _view(session_id, wizard)
    if wizard.current_step == WizardStep.SUCCESS:
        store.remove(session_id)
        await wizard.close()
        logger.info("Booking session completed", extra={"session_id": session_id, "doctor_id": wizard.doctor.id})
    return view


def _wizard_error(e: WizardError) -> HTTPException:
    if isinstance(e, ServiceNotOfferedError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=409, detail=str(e))


@router.post("/sessions", response_model=WizardViewSchema, status_code=201)
async def open_session(
    req: OpenSessionRequestSchema,
    store: WizardStorePort = Depends(get_wizard_store),
    factory: Callable[[DoctorSummary], BookingWizard] = Depends(get_wizard_factory),
):
    await close_idle_sessions(store)
    wizard = factory(
        DoctorSummary(
            id=req.doctor_id,
            full_name=req.doctor_name,
            specialty=req.specialty,
            image_url=req.image_url,
        )
    )
    await wizard.open()
    if not wizard.is_ready:
        await wizard.close()
        raise HTTPException(status_code=502, detail=wizard.error or "Availability unavailable")

    session_id = store.add(wizard)
    logger.info("Booking session opened", extra={"doctor_id": req.doctor_id, "session_id": session_id})
    return _view(session_id, wizard)


@router.get("/sessions/{session_id}", response_model=WizardViewSchema)
async def get_session(session_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    return _view(session_id, _get_wizard(session_id, store))


@router.get("/sessions/{session_id}/calendar", response_model=CalendarResponseSchema)
async def get_calendar(session_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = _get_wizard(session_id, store)
    return CalendarResponseSchema(
        session_id=session_id,
        days=[CalendarDaySchema(**asdict(day)) for day in wizard.booking_calendar()],
    )


@router.post("/sessions/{session_id}/service", response_model=WizardViewSchema)
async def select_service(
    session_id: str,
    req: SelectServiceRequestSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = _get_wizard(session_id, store)
    try:
        await wizard.select_service(req.kind)
    except WizardError as e:
        raise _wizard_error(e)
    return _view(session_id, wizard)


@router.post("/sessions/{session_id}/date", response_model=SelectionResponseSchema)
async def select_date(
    session_id: str,
    req: SelectDateRequestSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = _get_wizard(session_id, store)
    try:
        accepted = await wizard.select_date(parse_calendar_date(req.date))
    except InvalidTimeFormat as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WizardError as e:
        raise _wizard_error(e)
    return SelectionResponseSchema(accepted=accepted, wizard=_view(session_id, wizard))


@router.post("/sessions/{session_id}/time", response_model=SelectionResponseSchema)
async def select_time(
    session_id: str,
    req: SelectTimeRequestSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = _get_wizard(session_id, store)
    try:
        accepted = await wizard.select_time(req.time)
    except InvalidTimeFormat as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WizardError as e:
        raise _wizard_error(e)
    return SelectionResponseSchema(accepted=accepted, wizard=_view(session_id, wizard))


@router.post("/sessions/{session_id}/confirm", response_model=SelectionResponseSchema)
async def confirm_booking(session_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = _get_wizard(session_id, store)
    try:
        result = await wizard.confirm_booking()
    except WizardError as e:
        raise _wizard_error(e)
    return SelectionResponseSchema(accepted=result is not None, wizard=_view(session_id, wizard))


@router.post("/sessions/{session_id}/payment/complete", response_model=WizardViewSchema)
async def complete_payment(session_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = _get_wizard(session_id, store)
    try:
        await wizard.complete_payment()
    except WizardError as e:
        raise _wizard_error(e)
    return await _finish_if_completed(session_id, wizard, store)


@router.post("/sessions/{session_id}/step", response_model=WizardViewSchema)
async def go_to_step(
    session_id: str,
    req: GoToStepRequestSchema,
    store: WizardStorePort = Depends(get_wizard_store),
):
    wizard = _get_wizard(session_id, store)
    try:
        await wizard.go_to_step(req.step)
    except WizardError as e:
        raise _wizard_error(e)
    return await _finish_if_completed(session_id, wizard, store)


@router.post("/sessions/{session_id}/reset", response_model=WizardViewSchema)
async def reset_booking(session_id: str, store: WizardStorePort = Depends(get_wizard_store)):
    wizard = _get_wizard(session_id, store)
    try:
        await wizard.reset_booking()
    except WizardError as e:
        raise _wizard_error(e)
    return _view(session_id, wizard)


@router.delete("/sessions/{session_id}", status_code=204)
async def close_session(session_id: str, store: WizardStorePort = Depends(get_wizard_store)) -> Response:
    wizard = store.remove(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Booking session not found")
    await wizard.close()
    logger.info("Booking session closed", extra={"session_id": session_id})
    return Response(status_code=204)
