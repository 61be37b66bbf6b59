from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from venuedesk.domain.entities.session import Session, to_calendar_date


class BookingStatus(str, Enum):
    BOOKED = "booked"
    CANCELLED = "cancelled"
    CLOSED = "closed"


@dataclass(frozen=True)
class BookingDraft:
    """Booking as submitted for commit; the store assigns id and booking number."""

    enquiry_id: str
    sessions: tuple[Session, ...]
    event_date: date
    event_duration: int = 1
    event_dates: tuple[date, ...] = ()
    event_end_date: date | None = None
    client_name: str = ""
    salesperson_id: str | None = None
    contract_signed_at: datetime | None = None
    status: BookingStatus = BookingStatus.BOOKED

    def to_payload(self) -> dict[str, Any]:
        return {
            "enquiryId": self.enquiry_id,
            "clientName": self.client_name,
            "salespersonId": self.salesperson_id,
            "eventDate": self.event_date.isoformat(),
            "eventEndDate": self.event_end_date.isoformat() if self.event_end_date else None,
            "eventDuration": self.event_duration,
            "eventDates": [d.isoformat() for d in self.event_dates],
            "sessions": [s.to_payload() for s in self.sessions],
            "contractSigned": True,
            "contractSignedAt": self.contract_signed_at.isoformat() if self.contract_signed_at else None,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class Booking:
    id: str
    booking_number: str
    enquiry_id: str | None
    sessions: tuple[Session, ...] = ()
    status: BookingStatus = BookingStatus.BOOKED
    contract_signed_at: datetime | None = None
    client_name: str = ""
    event_date: date | None = None
    event_dates: tuple[date, ...] = ()

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "Booking":
        raw_id = payload.get("id") or payload.get("_id")
        if not raw_id:
            raise ValueError("Booking payload is missing 'id'.")
        raw_status = payload.get("status") or BookingStatus.BOOKED.value
        try:
            status = BookingStatus(raw_status)
        except ValueError:
            # post-booking operational states (pending_beo, in_progress, ...) are still live bookings
            status = BookingStatus.BOOKED
        signed = payload.get("contractSignedAt") or payload.get("contract_signed_at")
        if isinstance(signed, str):
            signed = datetime.fromisoformat(signed.replace("Z", "+00:00"))
        enquiry_id = payload.get("enquiryId") or payload.get("enquiry_id")
        return Booking(
            id=str(raw_id),
            booking_number=str(payload.get("bookingNumber") or payload.get("booking_number") or ""),
            enquiry_id=str(enquiry_id) if enquiry_id else None,
            sessions=tuple(Session.from_payload(s) for s in payload.get("sessions") or []),
            status=status,
            contract_signed_at=signed,
            client_name=str(payload.get("clientName") or payload.get("client_name") or ""),
            event_date=to_calendar_date(payload.get("eventDate") or payload.get("event_date")),
            event_dates=tuple(
                d for d in (to_calendar_date(v) for v in payload.get("eventDates") or []) if d is not None
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "bookingNumber": self.booking_number,
            "enquiryId": self.enquiry_id,
            "clientName": self.client_name,
            "status": self.status.value,
            "contractSignedAt": self.contract_signed_at.isoformat() if self.contract_signed_at else None,
            "eventDate": self.event_date.isoformat() if self.event_date else None,
            "eventDates": [d.isoformat() for d in self.event_dates],
            "sessions": [s.to_payload() for s in self.sessions],
        }

    @property
    def is_live(self) -> bool:
        return self.status == BookingStatus.BOOKED
