from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from venuedesk.application.exceptions import (
    ConflictAdvisory,
    ConflictBlocking,
    ConversionRejected,
    EnquiryNotFound,
    SchedulingError,
    StaleAvailability,
    StoreWriteConflict,
)
from venuedesk.application.ports.pipeline_store import PipelineStorePort, StoreCommitRejected
from venuedesk.application.use_cases.change_status import RequestStatusChangeUseCase
from venuedesk.application.use_cases.evaluate_conflicts import EvaluateConflictsUseCase
from venuedesk.application.utils.status_guard import allowed_targets
from venuedesk.domain.entities.booking import Booking, BookingDraft, BookingStatus
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.session import FieldError


class ConvertToBookingUseCase:
    def __init__(
        self,
        store: PipelineStorePort,
        evaluate_conflicts: EvaluateConflictsUseCase,
        change_status: RequestStatusChangeUseCase,
    ) -> None:
        self._store = store
        self._evaluate_conflicts = evaluate_conflicts
        self._change_status = change_status
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        enquiry_id: str,
        contract_signed: bool,
        advance_received: bool,
        bypass_advisory: bool = False,
        complete_follow_ups: bool = True,
        now: datetime | None = None,
    ) -> Booking:
        enquiry = self._store.get_enquiry(enquiry_id)
        if enquiry is None:
            raise EnquiryNotFound(enquiry_id)

        errors = conversion_errors(enquiry, contract_signed, advance_received)
        if errors:
            raise ConversionRejected(errors)

        draft = build_booking_draft(enquiry, now or datetime.now(timezone.utc))

        report = self._evaluate_conflicts.execute(draft.sessions, enquiry.id)
        if report.availability_unknown:
            raise StaleAvailability(report)
        if report.blocking:
            raise ConflictBlocking(report)
        if report.advisory and not bypass_advisory:
            raise ConflictAdvisory(report)

        # an earlier attempt may have committed the booking without advancing the enquiry
        booking = next(
            (b for b in self._store.list_bookings() if b.enquiry_id == enquiry.id and b.is_live),
            None,
        )
        if booking is not None:
            self._logger.info(
                "Resuming conversion with existing booking",
                extra={"enquiry_id": enquiry.id, "booking_number": booking.booking_number},
            )
        else:
            try:
                booking = self._store.create_booking(draft)
            except StoreCommitRejected as e:
                self._logger.warning(
                    "Booking commit rejected by store", extra={"enquiry_id": enquiry.id, "error": str(e)}
                )
                raise StoreWriteConflict(self._evaluate_conflicts.execute(draft.sessions, enquiry.id))

            self._logger.info(
                "Booking created",
                extra={"enquiry_id": enquiry.id, "booking_number": booking.booking_number},
            )

        try:
            self._change_status.execute(
                enquiry.id,
                EnquiryStatus.BOOKED,
                bypass_advisory=bypass_advisory,
                complete_follow_ups=complete_follow_ups,
                via_conversion=True,
                candidate_sessions=booking.sessions,
            )
        except SchedulingError as e:
            self._logger.error(
                "Booking created but enquiry status not advanced",
                extra={"enquiry_id": enquiry.id, "booking_number": booking.booking_number, "error": str(e)},
            )
            raise
        return booking


def conversion_errors(enquiry: Enquiry, contract_signed: bool, advance_received: bool) -> list[FieldError]:
    """Every unmet precondition, one entry each, so the caller can report all of them."""
    errors: list[FieldError] = []
    if not contract_signed:
        errors.append(FieldError("contractSigned", "Contract must be signed and terms agreed"))
    if not advance_received:
        errors.append(FieldError("advanceReceived", "Advance payment must be received"))
    if not enquiry.sessions:
        errors.append(FieldError("sessions", "At least one session with venue and timing is required"))
    for index, session in enumerate(enquiry.sessions):
        errors.extend(session.validation_errors(prefix=f"sessions[{index}]."))
    if enquiry.event_date is None:
        errors.append(FieldError("eventDate", "Event date is required"))
    if EnquiryStatus.BOOKED not in allowed_targets(enquiry.status, via_conversion=True):
        errors.append(
            FieldError("status", f"Enquiry in status '{enquiry.status.value}' cannot be booked; convert it first")
        )
    return errors


def build_booking_draft(enquiry: Enquiry, signed_at: datetime) -> BookingDraft:
    start = enquiry.event_date
    duration = max(1, enquiry.event_duration)
    event_dates = tuple(start + timedelta(days=i) for i in range(duration))

    if duration == 1:
        sessions = tuple(replace(s, session_date=start) for s in enquiry.sessions)
        end_date = None
    else:
        sessions = tuple(enquiry.sessions)
        end_date = start + timedelta(days=duration - 1)

    return BookingDraft(
        enquiry_id=enquiry.id,
        sessions=sessions,
        event_date=start,
        event_duration=duration,
        event_dates=event_dates,
        event_end_date=end_date,
        client_name=enquiry.client_name,
        salesperson_id=enquiry.salesperson_id,
        contract_signed_at=signed_at,
        status=BookingStatus.BOOKED,
    )
