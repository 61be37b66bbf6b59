"""
Tests for the HTTP surface with the store swapped for an in-memory one.
"""

from __future__ import annotations

from datetime import date

import pytest
from fastapi.testclient import TestClient

from venuedesk.application.ports.pipeline_store import RecordNotFound, StoreUnavailable
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.session import Session, Venue
from venuedesk.infrastructure.store.memory_store import MemoryPipelineStore
from venuedesk.main import app
from venuedesk.wiring.dependencies import get_store

HALL = Venue.ARECA_I.value
DAY = date(2025, 3, 1)


def _enquiry(enquiry_id: str, status: EnquiryStatus, start: str = "10:00", end: str = "14:00") -> Enquiry:
    return Enquiry(
        id=enquiry_id,
        status=status,
        sessions=(Session(session_name="Dinner", venue=HALL, session_date=DAY, start_time=start, end_time=end),),
        client_name=f"Client {enquiry_id}",
        event_date=DAY,
    )


class OfflineStore(MemoryPipelineStore):
    def list_enquiries(self):
        raise StoreUnavailable("pipeline API unreachable")


class VanishingStore(MemoryPipelineStore):
    """Enquiry is deleted between the read and the status write."""

    def update_enquiry_status(self, enquiry_id, status, fields, expected_status):
        raise RecordNotFound(f"Enquiry not found: {enquiry_id}")


@pytest.fixture
def store():
    memory = MemoryPipelineStore()
    app.dependency_overrides[get_store] = lambda: memory
    yield memory
    app.dependency_overrides.clear()


@pytest.fixture
def client(store):
    return TestClient(app)


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_evaluate_reports_blocking_conflict(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.CONVERTED))

    response = client.post(
        "/api/v1/conflicts/evaluate",
        json={
            "owner_id": "E2",
            "sessions": [
                {
                    "session_name": "Lunch",
                    "venue": HALL,
                    "session_date": "2025-03-01",
                    "start_time": "13:00",
                    "end_time": "16:00",
                }
            ],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["blocking"] is True
    assert body["advisory"] is False
    assert body["conflicts"][0]["overlap_window"] == ["13:00", "14:00"]
    assert body["conflicts"][0]["session_date"] == "2025-03-01"


def test_evaluate_unknown_availability_is_503(client):
    offline = OfflineStore()
    app.dependency_overrides[get_store] = lambda: offline

    response = client.post("/api/v1/conflicts/evaluate", json={"owner_id": None, "sessions": []})

    assert response.status_code == 503
    assert response.json()["availability_unknown"] is True


def test_illegal_transition_is_400(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.NEW))

    response = client.post("/api/v1/enquiries/E1/status", json={"status": "converted"})

    assert response.status_code == 400


def test_missing_loss_reason_is_422(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.ONGOING))

    response = client.post("/api/v1/enquiries/E1/status", json={"status": "lost"})

    assert response.status_code == 422
    assert response.json()["detail"]["errors"] == [
        {"field": "lossReason", "message": "Loss reason is required when marking enquiry as lost"}
    ]


def test_advisory_conflict_then_bypass(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.QUOTATION_SENT))
    store.add_enquiry(_enquiry("E2", EnquiryStatus.ONGOING, "13:00", "16:00"))

    refused = client.post("/api/v1/enquiries/E2/status", json={"status": "converted"})
    assert refused.status_code == 409
    assert refused.json()["detail"]["bypassable"] is True
    assert refused.json()["detail"]["report"]["advisory"] is True

    accepted = client.post("/api/v1/enquiries/E2/status", json={"status": "converted", "bypass_advisory": True})
    assert accepted.status_code == 200
    assert accepted.json()["action"] == "accepted"
    assert accepted.json()["advisory_overridden"] is True
    assert accepted.json()["enquiry"]["status"] == "converted"


def test_blocking_conflict_is_409_not_bypassable(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.CONVERTED))
    store.add_enquiry(_enquiry("E2", EnquiryStatus.ONGOING, "13:00", "16:00"))

    response = client.post("/api/v1/enquiries/E2/status", json={"status": "converted", "bypass_advisory": True})

    assert response.status_code == 409
    assert response.json()["detail"]["bypassable"] is False


def test_unknown_enquiry_is_404(client):
    response = client.post("/api/v1/enquiries/nope/status", json={"status": "lost", "loss_reason": "budget"})

    assert response.status_code == 404


def test_enquiry_deleted_before_write_is_404(client):
    vanishing = VanishingStore(enquiries=[_enquiry("E1", EnquiryStatus.ONGOING)])
    app.dependency_overrides[get_store] = lambda: vanishing

    response = client.post("/api/v1/enquiries/E1/status", json={"status": "lost", "loss_reason": "budget"})

    assert response.status_code == 404


def test_reopen(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.LOST))

    missing_notes = client.post("/api/v1/enquiries/E1/reopen", json={"reason": "other"})
    assert missing_notes.status_code == 422

    response = client.post("/api/v1/enquiries/E1/reopen", json={"reason": "client_reconnected"})
    assert response.status_code == 200
    assert response.json()["status"] == "ongoing"


def test_convert_flow(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.CONVERTED))

    rejected = client.post("/api/v1/enquiries/E1/convert", json={"contract_signed": True})
    assert rejected.status_code == 422
    assert [e["field"] for e in rejected.json()["detail"]["errors"]] == ["advanceReceived"]

    response = client.post(
        "/api/v1/enquiries/E1/convert", json={"contract_signed": True, "advance_received": True}
    )
    assert response.status_code == 200
    assert response.json()["booking_number"] == "BK-0001"
    assert response.json()["event_dates"] == ["2025-03-01"]
    assert store.get_enquiry("E1").status == EnquiryStatus.BOOKED


def test_follow_up_endpoints(client, store):
    store.add_enquiry(_enquiry("E1", EnquiryStatus.QUOTATION_SENT))

    created = client.post(
        "/api/v1/follow-ups",
        json={"enquiry_id": "E1", "follow_up_date": "2025-02-01", "repeat_follow_up": True, "repeat_interval": 14},
    )
    assert created.status_code == 201
    follow_ups = created.json()["follow_ups"]
    assert [f["follow_up_date"] for f in follow_ups] == ["2025-02-01", "2025-02-15", "2025-03-01"]
    assert follow_ups[0]["follow_up_time"] == "12:00"

    completed = client.patch(f"/api/v1/follow-ups/{follow_ups[0]['id']}/complete")
    assert completed.status_code == 200
    assert completed.json()["completed"] is True

    listed = client.get("/api/v1/enquiries/E1/follow-ups")
    assert listed.status_code == 200
    assert listed.json()["follow_ups"][0]["due_state"] == "completed"

    too_late = client.post("/api/v1/follow-ups", json={"enquiry_id": "E1", "follow_up_date": "2025-03-02"})
    assert too_late.status_code == 422

    missing = client.patch("/api/v1/follow-ups/nope/complete")
    assert missing.status_code == 404


def test_quotation_calculate(client):
    response = client.post(
        "/api/v1/quotations/calculate",
        json={
            "venues": [{"venue": HALL, "session_rate": "1000"}],
            "include_gst": True,
            "discount": {"type": "percentage", "value": "12"},
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert float(body["grand_total"]) == 1180.0
    assert float(body["discount_amount"]) == 141.6
    assert body["discount_exceeds_limit"] is True
