"""
Tests for the booking session HTTP endpoints.
"""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from clinic_booking.api.v1.booking import get_wizard_factory
from clinic_booking.domain.entities.slot import BookedSlot
from clinic_booking.infrastructure.booking_api.mock_booking_service import MockBookingService
from clinic_booking.infrastructure.store.memory_store import MemoryWizardStore
from clinic_booking.main import app
from clinic_booking.wiring.dependencies import get_wizard_store

from tests.support import make_doctor, make_wizard

BASE = "/api/v1/booking"


@pytest.fixture
def backend():
    return MockBookingService({"doc-1": make_doctor()})


@pytest.fixture
def client(backend):
    store = MemoryWizardStore()
    app.dependency_overrides[get_wizard_store] = lambda: store
    app.dependency_overrides[get_wizard_factory] = lambda: (
        lambda doctor: make_wizard(backend, doctor_id=doctor.id)
    )
    with TestClient(app) as test_client:
        yield test_client
        for session_id in store.session_ids():
            test_client.delete(f"{BASE}/sessions/{session_id}")
    app.dependency_overrides.clear()


def _open(client) -> dict:
    response = client.post(f"{BASE}/sessions", json={"doctor_id": "doc-1", "doctor_name": "Dr. Test"})
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_open_session_lists_services(client):
    view = _open(client)

    assert view["current_step"] == 1
    assert view["is_ready"] is True
    assert view["doctor"]["full_name"] == "Dr. Test"
    kinds = [service["kind"] for service in view["services"]]
    assert kinds == ["regular_checkup", "follow_up"]


def test_full_booking_over_http(client):
    session_id = _open(client)["session_id"]

    view = client.post(f"{BASE}/sessions/{session_id}/service", json={"kind": "follow_up"}).json()
    assert view["current_step"] == 2
    assert view["selected_service_details"]["type"] == 2

    body = client.post(f"{BASE}/sessions/{session_id}/date", json={"date": "2025-11-08"}).json()
    assert body["accepted"] is True
    assert body["wizard"]["current_step"] == 3
    assert len(body["wizard"]["slots"]) == 12
    assert body["wizard"]["is_refreshing"] is True

    body = client.post(f"{BASE}/sessions/{session_id}/time", json={"time": "09:20"}).json()
    assert body["accepted"] is True
    assert body["wizard"]["current_step"] == 4

    body = client.post(f"{BASE}/sessions/{session_id}/confirm").json()
    assert body["accepted"] is True
    assert body["wizard"]["current_step"] == 5
    booking = body["wizard"]["booking_result"]
    assert booking["appointment_date"] == "2025-11-08"
    assert booking["appointment_time"] == "09:20"
    assert booking["payment_status"] == "Pending"

    response = client.post(f"{BASE}/sessions/{session_id}/step", json={"step": 3})
    assert response.status_code == 409

    view = client.post(f"{BASE}/sessions/{session_id}/payment/complete").json()
    assert view["current_step"] == 6
    assert view["booking_result"]["appointment_time"] == "09:20"

    # A completed session is discarded.
    assert client.get(f"{BASE}/sessions/{session_id}").status_code == 404


def test_conflict_returns_to_time_selection(client, backend):
    session_id = _open(client)["session_id"]
    client.post(f"{BASE}/sessions/{session_id}/service", json={"kind": "regular_checkup"})
    client.post(f"{BASE}/sessions/{session_id}/date", json={"date": "2025-11-03"})
    client.post(f"{BASE}/sessions/{session_id}/time", json={"time": "10:00"})

    backend.book_slot("doc-1", date(2025, 11, 3), BookedSlot(time="10:00"))

    body = client.post(f"{BASE}/sessions/{session_id}/confirm").json()
    assert body["accepted"] is False
    wizard = body["wizard"]
    assert wizard["current_step"] == 3
    assert wizard["selected_time"] is None
    assert wizard["error"] == "This appointment slot is already booked."
    assert wizard["booked_count"] == 1


def test_unavailable_time_not_accepted(client):
    session_id = _open(client)["session_id"]
    client.post(f"{BASE}/sessions/{session_id}/service", json={"kind": "regular_checkup"})
    client.post(f"{BASE}/sessions/{session_id}/date", json={"date": "2025-11-03"})

    body = client.post(f"{BASE}/sessions/{session_id}/time", json={"time": "08:00"}).json()
    assert body["accepted"] is False
    assert body["wizard"]["current_step"] == 3


def test_calendar(client):
    session_id = _open(client)["session_id"]
    days = client.get(f"{BASE}/sessions/{session_id}/calendar").json()["days"]
    by_date = {day["date"]: day for day in days}

    assert len(days) == 31
    assert by_date["2025-11-03"]["status"] == "available"
    assert by_date["2025-11-07"]["status"] == "closed"
    assert by_date["2025-11-08"]["status"] == "exceptional"


def test_unknown_session_is_404(client):
    assert client.get(f"{BASE}/sessions/missing").status_code == 404
    assert client.delete(f"{BASE}/sessions/missing").status_code == 404


def test_out_of_order_action_is_409(client):
    session_id = _open(client)["session_id"]
    response = client.post(f"{BASE}/sessions/{session_id}/time", json={"time": "09:00"})
    assert response.status_code == 409


def test_bad_date_is_400(client):
    session_id = _open(client)["session_id"]
    client.post(f"{BASE}/sessions/{session_id}/service", json={"kind": "regular_checkup"})
    response = client.post(f"{BASE}/sessions/{session_id}/date", json={"date": "03/11/2025"})
    assert response.status_code == 400


def test_unknown_doctor_is_502(client):
    response = client.post(f"{BASE}/sessions", json={"doctor_id": "nobody"})
    assert response.status_code == 502
    assert response.json()["detail"] == "Doctor not found."


def test_close_session(client):
    session_id = _open(client)["session_id"]
    assert client.delete(f"{BASE}/sessions/{session_id}").status_code == 204
    assert client.get(f"{BASE}/sessions/{session_id}").status_code == 404
