from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from venuedesk.domain.entities.session import Session, to_calendar_date


class EnquiryStatus(str, Enum):
    NEW = "new"
    QUOTATION_SENT = "quotation_sent"
    ONGOING = "ongoing"
    CONVERTED = "converted"
    LOST = "lost"
    CLOSED = "closed"
    BOOKED = "booked"


class AssignmentStatus(str, Enum):
    UNASSIGNED = "unassigned"
    PENDING = "pending"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Enquiry:
    id: str
    status: EnquiryStatus = EnquiryStatus.NEW
    sessions: tuple[Session, ...] = ()
    assignment_status: AssignmentStatus = AssignmentStatus.ASSIGNED
    enquiry_number: str | None = None
    client_name: str = ""
    salesperson_id: str | None = None
    follow_up_date: date | None = None
    event_date: date | None = None
    event_duration: int = 1
    closure_reason: str | None = None
    loss_reason: str | None = None
    notes: str | None = None

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "Enquiry":
        raw_id = payload.get("id") or payload.get("_id")
        if not raw_id:
            raise ValueError("Enquiry payload is missing 'id'.")
        try:
            duration = max(1, int(payload.get("eventDuration") or payload.get("event_duration") or 1))
        except (TypeError, ValueError):
            duration = 1
        return Enquiry(
            id=str(raw_id),
            status=EnquiryStatus(payload.get("status") or EnquiryStatus.NEW.value),
            sessions=tuple(Session.from_payload(s) for s in payload.get("sessions") or []),
            assignment_status=AssignmentStatus(
                payload.get("assignmentStatus") or payload.get("assignment_status") or AssignmentStatus.ASSIGNED.value
            ),
            enquiry_number=payload.get("enquiryNumber") or payload.get("enquiry_number"),
            client_name=str(payload.get("clientName") or payload.get("client_name") or ""),
            salesperson_id=payload.get("salespersonId") or payload.get("salesperson_id"),
            follow_up_date=to_calendar_date(payload.get("followUpDate") or payload.get("follow_up_date")),
            event_date=to_calendar_date(payload.get("eventDate") or payload.get("event_date")),
            event_duration=duration,
            closure_reason=payload.get("closureReason") or payload.get("closure_reason"),
            # the store has used both spellings over time
            loss_reason=payload.get("lossReason") or payload.get("lostReason") or payload.get("loss_reason"),
            notes=payload.get("notes"),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "enquiryNumber": self.enquiry_number,
            "clientName": self.client_name,
            "status": self.status.value,
            "assignmentStatus": self.assignment_status.value,
            "salespersonId": self.salesperson_id,
            "followUpDate": self.follow_up_date.isoformat() if self.follow_up_date else None,
            "eventDate": self.event_date.isoformat() if self.event_date else None,
            "eventDuration": self.event_duration,
            "closureReason": self.closure_reason,
            "lossReason": self.loss_reason,
            "notes": self.notes,
            "sessions": [s.to_payload() for s in self.sessions],
        }

    @property
    def is_withdrawn(self) -> bool:
        return self.status in (EnquiryStatus.LOST, EnquiryStatus.CLOSED)
