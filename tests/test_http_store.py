"""
Tests for the REST pipeline store adapter using httpx.MockTransport.
"""

from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from venuedesk.application.ports.pipeline_store import RecordNotFound, StoreCommitRejected, StoreUnavailable
from venuedesk.domain.entities.booking import BookingStatus
from venuedesk.domain.entities.enquiry import EnquiryStatus
from venuedesk.application.use_cases.evaluate_conflicts import EvaluateConflictsUseCase
from venuedesk.domain.entities.session import Session
from venuedesk.infrastructure.store.http_store import HttpPipelineStore

BASE_URL = "https://pipeline.example.test"

ENQUIRY = {
    "_id": "E1",
    "enquiryNumber": "ENQ-0001",
    "clientName": "Mehta Wedding",
    "status": "ongoing",
    "eventDate": "2025-03-01T00:00:00.000Z",
    "lostReason": None,
    "sessions": [
        {
            "sessionName": "Reception",
            "venue": "Areca I - The Banquet Hall",
            "sessionDate": "2025-03-01T00:00:00.000Z",
            "startTime": "9:30",
            "endTime": "14:00",
        }
    ],
}


def _store(handler, token: str | None = "secret") -> HttpPipelineStore:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpPipelineStore(base_url=BASE_URL, api_token=token, client=client)


def test_list_enquiries_parses_payload_and_sends_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["path"] = request.url.path
        return httpx.Response(200, json=[ENQUIRY])

    enquiries = _store(handler).list_enquiries()

    assert seen == {"auth": "Bearer secret", "path": "/api/enquiries"}
    assert enquiries[0].id == "E1"
    assert enquiries[0].status == EnquiryStatus.ONGOING
    assert enquiries[0].sessions[0].start_time == "09:30"


def test_unknown_booking_status_is_treated_as_live():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"id": "B1", "bookingNumber": "BK-0001", "status": "pending_beo"}])

    bookings = _store(handler).list_bookings()

    assert bookings[0].status == BookingStatus.BOOKED
    assert bookings[0].is_live


def test_missing_enquiry_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Enquiry not found"})

    assert _store(handler).get_enquiry("nope") is None


def test_status_update_sends_expected_status():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={**ENQUIRY, "status": "lost", "lossReason": "budget"})

    updated = _store(handler).update_enquiry_status(
        "E1", EnquiryStatus.LOST, {"lossReason": "budget"}, expected_status=EnquiryStatus.ONGOING
    )

    assert captured["method"] == "PATCH"
    assert captured["body"] == {"lossReason": "budget", "status": "lost", "expectedStatus": "ongoing"}
    assert updated.loss_reason == "budget"


def test_conflict_response_is_commit_rejection():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "Venue already booked"})

    with pytest.raises(StoreCommitRejected, match="Venue already booked"):
        _store(handler).update_enquiry_status("E1", EnquiryStatus.CONVERTED, {}, EnquiryStatus.ONGOING)


def test_server_error_and_transport_failure_are_unavailable():
    def broken(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StoreUnavailable):
        _store(broken).list_bookings()
    with pytest.raises(StoreUnavailable):
        _store(unreachable).list_enquiries()


def test_complete_follow_up_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Follow-up not found"})

    with pytest.raises(RecordNotFound):
        _store(handler).complete_follow_up("F9")


def test_complete_all_reads_count():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/enquiries/E1/complete-all-followups"
        return httpx.Response(200, json={"modifiedCount": 3})

    assert _store(handler, token=None).complete_all_follow_ups("E1") == 3


def test_base_url_is_required():
    with pytest.raises(ValueError):
        HttpPipelineStore(base_url="", client=httpx.Client())


def test_malformed_record_is_store_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/enquiries":
            return httpx.Response(200, json=[{"id": "E1", "status": "archived"}])
        return httpx.Response(200, json=[])

    store = _store(handler)

    with pytest.raises(StoreUnavailable):
        store.list_enquiries()

    report = EvaluateConflictsUseCase(store=store).execute(
        [
            Session(
                session_name="Reception",
                venue="Areca I - The Banquet Hall",
                session_date=date(2025, 3, 1),
                start_time="18:00",
                end_time="23:00",
            )
        ],
        "E2",
    )
    assert report.availability_unknown
    assert not report.blocking
