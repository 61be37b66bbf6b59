from __future__ import annotations

from typing import Iterable, Sequence

from venuedesk.application.utils.overlap import overlap_window
from venuedesk.domain.entities.booking import Booking
from venuedesk.domain.entities.conflict import ConflictDetail, ConflictReport, ConflictSeverity
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.session import Session

BLOCKING_ENQUIRY_STATUSES = frozenset({EnquiryStatus.CONVERTED, EnquiryStatus.BOOKED})
ADVISORY_ENQUIRY_STATUSES = frozenset(
    {EnquiryStatus.NEW, EnquiryStatus.QUOTATION_SENT, EnquiryStatus.ONGOING}
)


def classify(
    candidate_sessions: Sequence[Session],
    candidate_owner_id: str | None,
    enquiries: Iterable[Enquiry],
    bookings: Iterable[Booking],
) -> ConflictReport:
    """
    Compare candidate sessions against every other active enquiry and booking.

    Hits against bookings and converted enquiries are BLOCKING, hits against
    new/quotation_sent/ongoing enquiries are ADVISORY. Lost/closed enquiries
    and cancelled/closed bookings never conflict. The owner is excluded, as is
    any booking made from the owner enquiry. Once an enquiry has a booking,
    the booking's sessions stand in for the enquiry's.
    """
    enquiries = list(enquiries)
    bookings = list(bookings)
    candidates = [s for s in candidate_sessions if s.is_schedulable]

    booked_enquiry_ids = {b.enquiry_id for b in bookings if b.enquiry_id}
    details: list[ConflictDetail] = []

    for booking in bookings:
        if not booking.is_live:
            continue
        if candidate_owner_id is not None and candidate_owner_id in (booking.id, booking.enquiry_id):
            continue
        details.extend(
            _collect(
                candidates,
                booking.sessions,
                severity=ConflictSeverity.BLOCKING,
                kind="booking",
                counterpart_id=booking.id,
                reference=booking.booking_number or None,
                client=booking.client_name,
                status=booking.status.value,
            )
        )

    for enquiry in enquiries:
        if enquiry.is_withdrawn:
            continue
        if candidate_owner_id is not None and enquiry.id == candidate_owner_id:
            continue
        if enquiry.id in booked_enquiry_ids:
            continue
        if enquiry.status in BLOCKING_ENQUIRY_STATUSES:
            severity = ConflictSeverity.BLOCKING
        elif enquiry.status in ADVISORY_ENQUIRY_STATUSES:
            severity = ConflictSeverity.ADVISORY
        else:
            continue
        details.extend(
            _collect(
                candidates,
                enquiry.sessions,
                severity=severity,
                kind="enquiry",
                counterpart_id=enquiry.id,
                reference=enquiry.enquiry_number,
                client=enquiry.client_name,
                status=enquiry.status.value,
            )
        )

    return ConflictReport(
        blocking=any(d.severity == ConflictSeverity.BLOCKING for d in details),
        advisory=any(d.severity == ConflictSeverity.ADVISORY for d in details),
        details=tuple(details),
    )


def _collect(
    candidates: list[Session],
    counterpart_sessions: Iterable[Session],
    *,
    severity: ConflictSeverity,
    kind: str,
    counterpart_id: str,
    reference: str | None,
    client: str,
    status: str,
) -> list[ConflictDetail]:
    counterpart_sessions = list(counterpart_sessions)
    hits: list[ConflictDetail] = []
    for candidate in candidates:
        for other in counterpart_sessions:
            window = overlap_window(candidate, other)
            if window is None:
                continue
            hits.append(
                ConflictDetail(
                    severity=severity,
                    venue=candidate.venue,
                    session_date=candidate.session_date,
                    candidate_session=candidate.session_name,
                    candidate_window=(candidate.start_time, candidate.end_time),
                    counterpart_window=(other.start_time, other.end_time),
                    overlap_window=window,
                    counterpart_kind=kind,
                    counterpart_id=counterpart_id,
                    counterpart_reference=reference,
                    counterpart_client=client,
                    counterpart_status=status,
                )
            )
    return hits
