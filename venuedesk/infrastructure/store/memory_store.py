from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Any, Iterable

from venuedesk.application.ports.pipeline_store import (
    PipelineStorePort,
    RecordNotFound,
    StoreCommitRejected,
)
from venuedesk.application.utils.conflict_classifier import classify
from venuedesk.application.utils.status_guard import COMMITTING_STATUSES, REOPENABLE_STATUSES
from venuedesk.domain.entities.booking import Booking, BookingDraft
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.follow_up import FollowUp, FollowUpDraft


class MemoryPipelineStore(PipelineStorePort):
    """
    In-process store. Commits are serialised by one lock and re-check the
    expected status and the venue invariant, which closes the read-then-write
    gap the scheduling core leaves open.
    """

    def __init__(
        self,
        enquiries: Iterable[Enquiry] = (),
        bookings: Iterable[Booking] = (),
        follow_ups: Iterable[FollowUp] = (),
    ) -> None:
        self._enquiries: dict[str, Enquiry] = {e.id: e for e in enquiries}
        self._bookings: dict[str, Booking] = {b.id: b for b in bookings}
        self._follow_ups: dict[str, FollowUp] = {f.id: f for f in follow_ups}
        self._booking_seq = len(self._bookings)
        self._lock = threading.Lock()

    def add_enquiry(self, enquiry: Enquiry) -> Enquiry:
        with self._lock:
            self._enquiries[enquiry.id] = enquiry
            self._after_write()
        return enquiry

    def list_enquiries(self) -> list[Enquiry]:
        return list(self._enquiries.values())

    def list_bookings(self) -> list[Booking]:
        return list(self._bookings.values())

    def get_enquiry(self, enquiry_id: str) -> Enquiry | None:
        return self._enquiries.get(enquiry_id)

    def update_enquiry_status(
        self,
        enquiry_id: str,
        status: EnquiryStatus,
        fields: dict[str, Any],
        expected_status: EnquiryStatus,
    ) -> Enquiry:
        with self._lock:
            current = self._require_enquiry(enquiry_id)
            if current.status != expected_status:
                raise StoreCommitRejected(
                    f"Enquiry {enquiry_id} is '{current.status.value}', expected '{expected_status.value}'"
                )
            if status in COMMITTING_STATUSES:
                booking = next(
                    (b for b in self._bookings.values() if b.enquiry_id == enquiry_id and b.is_live), None
                )
                sessions = booking.sessions if booking is not None else current.sessions
                report = classify(sessions, current.id, self._enquiries.values(), self._bookings.values())
                if report.blocking:
                    raise StoreCommitRejected(f"Venue already committed: {'; '.join(report.messages)}")

            updated = replace(current, status=status, **_status_fields(fields))
            self._enquiries[enquiry_id] = updated
            self._after_write()
            return updated

    def create_booking(self, draft: BookingDraft) -> Booking:
        with self._lock:
            if any(b.enquiry_id == draft.enquiry_id for b in self._bookings.values()):
                raise StoreCommitRejected(f"Enquiry {draft.enquiry_id} already has a booking")
            report = classify(draft.sessions, draft.enquiry_id, self._enquiries.values(), self._bookings.values())
            if report.blocking:
                raise StoreCommitRejected(f"Venue already committed: {'; '.join(report.messages)}")

            self._booking_seq += 1
            booking = Booking(
                id=uuid.uuid4().hex,
                booking_number=f"BK-{self._booking_seq:04d}",
                enquiry_id=draft.enquiry_id,
                sessions=tuple(
                    s if s.id else replace(s, id=uuid.uuid4().hex[:12]) for s in draft.sessions
                ),
                status=draft.status,
                contract_signed_at=draft.contract_signed_at,
                client_name=draft.client_name,
                event_date=draft.event_date,
                event_dates=draft.event_dates,
            )
            self._bookings[booking.id] = booking
            self._after_write()
            return booking

    def reopen_enquiry(self, enquiry_id: str, reason: str, notes: str | None) -> Enquiry:
        with self._lock:
            current = self._require_enquiry(enquiry_id)
            if current.status not in REOPENABLE_STATUSES:
                raise StoreCommitRejected(f"Enquiry {enquiry_id} is '{current.status.value}' and cannot be reopened")
            reopened = replace(
                current,
                status=EnquiryStatus.ONGOING,
                loss_reason=None,
                closure_reason=None,
                notes=notes if notes is not None else current.notes,
            )
            self._enquiries[enquiry_id] = reopened
            self._after_write()
            return reopened

    def list_follow_ups(self, enquiry_id: str) -> list[FollowUp]:
        return [f for f in self._follow_ups.values() if f.enquiry_id == enquiry_id]

    def create_follow_up(self, draft: FollowUpDraft) -> FollowUp:
        follow_up = FollowUp(
            id=uuid.uuid4().hex,
            enquiry_id=draft.enquiry_id,
            follow_up_date=draft.follow_up_date,
            follow_up_time=draft.follow_up_time,
            notes=draft.notes,
            repeat_follow_up=draft.repeat_follow_up,
            repeat_interval=draft.repeat_interval if draft.repeat_follow_up else None,
            repeat_end_date=draft.repeat_end_date if draft.repeat_follow_up else None,
        )
        with self._lock:
            self._follow_ups[follow_up.id] = follow_up
            self._after_write()
        return follow_up

    def complete_follow_up(self, follow_up_id: str) -> FollowUp:
        with self._lock:
            current = self._follow_ups.get(follow_up_id)
            if current is None:
                raise RecordNotFound(f"Follow-up not found: {follow_up_id}")
            if current.completed:
                return current
            done = replace(current, completed=True, completed_at=datetime.now(timezone.utc))
            self._follow_ups[follow_up_id] = done
            self._after_write()
            return done

    def complete_all_follow_ups(self, enquiry_id: str) -> int:
        with self._lock:
            now = datetime.now(timezone.utc)
            changed = 0
            for follow_up in list(self._follow_ups.values()):
                if follow_up.enquiry_id == enquiry_id and not follow_up.completed:
                    self._follow_ups[follow_up.id] = replace(follow_up, completed=True, completed_at=now)
                    changed += 1
            if changed:
                self._after_write()
            return changed

    def _require_enquiry(self, enquiry_id: str) -> Enquiry:
        enquiry = self._enquiries.get(enquiry_id)
        if enquiry is None:
            raise RecordNotFound(f"Enquiry not found: {enquiry_id}")
        return enquiry

    def _after_write(self) -> None:
        """Hook for persistent subclasses; called with the lock held."""
        return None


def _status_fields(fields: dict[str, Any]) -> dict[str, Any]:
    mapped: dict[str, Any] = {}
    if "closureReason" in fields:
        mapped["closure_reason"] = fields["closureReason"]
    if "lossReason" in fields:
        mapped["loss_reason"] = fields["lossReason"]
    if "lossReasonNotes" in fields:
        mapped["notes"] = fields["lossReasonNotes"]
    if "followUpDate" in fields:
        value = fields["followUpDate"]
        mapped["follow_up_date"] = date.fromisoformat(value) if isinstance(value, str) else value
    return mapped
