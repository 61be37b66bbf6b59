from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import httpx

from venuedesk.application.ports.pipeline_store import (
    PipelineStorePort,
    RecordNotFound,
    StoreCommitRejected,
    StoreUnavailable,
)
from venuedesk.core.config import settings
from venuedesk.domain.entities.booking import Booking, BookingDraft
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.follow_up import FollowUp, FollowUpDraft

T = TypeVar("T")


class HttpPipelineStore(PipelineStorePort):
    """Adapter for the sales-pipeline REST API that owns enquiries, bookings and follow-ups."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.STORE_BASE_URL or "").rstrip("/")
        self._api_token = api_token or settings.STORE_API_TOKEN
        self._client = client or httpx.Client(timeout=timeout or settings.STORE_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("STORE_BASE_URL is required for the HTTP pipeline store")

    def list_enquiries(self) -> list[Enquiry]:
        data = self._request("GET", "/api/enquiries")
        return [self._parse(Enquiry.from_payload, item, "/api/enquiries") for item in data or []]

    def list_bookings(self) -> list[Booking]:
        data = self._request("GET", "/api/bookings")
        return [self._parse(Booking.from_payload, item, "/api/bookings") for item in data or []]

    def get_enquiry(self, enquiry_id: str) -> Enquiry | None:
        try:
            data = self._request("GET", f"/api/enquiries/{enquiry_id}")
        except RecordNotFound:
            return None
        return self._parse(Enquiry.from_payload, data, f"/api/enquiries/{enquiry_id}")

    def update_enquiry_status(
        self,
        enquiry_id: str,
        status: EnquiryStatus,
        fields: dict[str, Any],
        expected_status: EnquiryStatus,
    ) -> Enquiry:
        payload = {**fields, "status": status.value, "expectedStatus": expected_status.value}
        data = self._request("PATCH", f"/api/enquiries/{enquiry_id}", json=payload)
        return self._parse(Enquiry.from_payload, data, f"/api/enquiries/{enquiry_id}")

    def create_booking(self, draft: BookingDraft) -> Booking:
        data = self._request("POST", "/api/bookings", json=draft.to_payload())
        booking = self._parse(Booking.from_payload, data, "/api/bookings")
        self._logger.info(
            "Booking committed",
            extra={"enquiry_id": draft.enquiry_id, "booking_number": booking.booking_number},
        )
        return booking

    def reopen_enquiry(self, enquiry_id: str, reason: str, notes: str | None) -> Enquiry:
        data = self._request("POST", f"/api/enquiries/{enquiry_id}/reopen", json={"reason": reason, "notes": notes})
        return self._parse(Enquiry.from_payload, data, f"/api/enquiries/{enquiry_id}/reopen")

    def list_follow_ups(self, enquiry_id: str) -> list[FollowUp]:
        path = f"/api/enquiries/{enquiry_id}/follow-ups"
        data = self._request("GET", path)
        return [self._parse(FollowUp.from_payload, item, path) for item in data or []]

    def create_follow_up(self, draft: FollowUpDraft) -> FollowUp:
        data = self._request("POST", "/api/follow-ups", json=draft.to_payload())
        return self._parse(FollowUp.from_payload, data, "/api/follow-ups")

    def complete_follow_up(self, follow_up_id: str) -> FollowUp:
        data = self._request("PATCH", f"/api/follow-ups/{follow_up_id}/complete", json={})
        return self._parse(FollowUp.from_payload, data, f"/api/follow-ups/{follow_up_id}/complete")

    def complete_all_follow_ups(self, enquiry_id: str) -> int:
        data = self._request("POST", f"/api/enquiries/{enquiry_id}/complete-all-followups", json={})
        if isinstance(data, dict):
            return int(data.get("completed") or data.get("modifiedCount") or 0)
        return 0

    def _parse(self, factory: Callable[[Any], T], payload: Any, path: str) -> T:
        """Build an entity from a store record; a record that does not fit the contract is a store failure."""
        try:
            return factory(payload)
        except (ValueError, TypeError, AttributeError) as e:
            self._logger.error("Pipeline store returned a malformed record", extra={"path": path, "error": str(e)})
            raise StoreUnavailable(f"{path} returned a malformed record: {e}") from e

    def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"

        try:
            response = self._client.request(method, url, json=json, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Pipeline store unreachable", extra={"method": method, "path": path, "error": str(e)})
            raise StoreUnavailable(f"{method} {path} failed: {e}") from e

        if response.status_code == 409:
            raise StoreCommitRejected(_error_message(response))
        if response.status_code == 404:
            raise RecordNotFound(_error_message(response))
        if response.status_code >= 400:
            self._logger.error(
                "Pipeline store request failed",
                extra={"method": method, "path": path, "status": response.status_code},
            )
            raise StoreUnavailable(f"{method} {path} returned {response.status_code}: {_error_message(response)}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreUnavailable(f"{method} {path} returned a non-JSON body") from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body)
    return str(body)
