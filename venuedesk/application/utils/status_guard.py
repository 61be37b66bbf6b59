from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any

from venuedesk.application.exceptions import TransitionIllegal, ValidationError
from venuedesk.domain.entities.enquiry import EnquiryStatus
from venuedesk.domain.entities.session import FieldError

S = EnquiryStatus

TRANSITIONS: dict[EnquiryStatus, frozenset[EnquiryStatus]] = {
    S.NEW: frozenset({S.QUOTATION_SENT, S.LOST}),
    S.QUOTATION_SENT: frozenset({S.ONGOING, S.LOST}),
    S.ONGOING: frozenset({S.CONVERTED, S.LOST}),
    S.CONVERTED: frozenset({S.LOST, S.BOOKED}),
    S.BOOKED: frozenset(),
    S.LOST: frozenset(),
    S.CLOSED: frozenset(),
}

# edges only Booking Conversion may take
CONVERSION_ONLY: frozenset[tuple[EnquiryStatus, EnquiryStatus]] = frozenset({(S.CONVERTED, S.BOOKED)})

# targets that create a real-world commitment and must pass the conflict check
COMMITTING_STATUSES = frozenset({S.CONVERTED, S.BOOKED})

REOPENABLE_STATUSES = frozenset({S.LOST, S.CLOSED})
REOPEN_REASONS = frozenset({"client_reconnected", "wrongly_marked_lost", "other"})
OTHER_REASON = "other"


@dataclass(frozen=True)
class StatusAuxData:
    loss_reason: str | None = None
    notes: str | None = None
    closure_reason: str | None = None
    follow_up_date: date | None = None
    follow_up_notes: str | None = None


def allowed_targets(current: EnquiryStatus, via_conversion: bool = False) -> frozenset[EnquiryStatus]:
    targets = TRANSITIONS.get(current, frozenset())
    if via_conversion:
        return targets
    return frozenset(t for t in targets if (current, t) not in CONVERSION_ONLY)


def check_transition(current: EnquiryStatus, target: EnquiryStatus | str, via_conversion: bool = False) -> EnquiryStatus:
    """Return the target as an EnquiryStatus, or raise TransitionIllegal."""
    try:
        target_status = EnquiryStatus(target)
    except ValueError:
        raise TransitionIllegal(current.value, str(target))
    if target_status not in allowed_targets(current, via_conversion=via_conversion):
        raise TransitionIllegal(current.value, target_status.value)
    return target_status


def required_aux_errors(
    target: EnquiryStatus,
    aux: StatusAuxData,
    event_date: date | None = None,
) -> list[FieldError]:
    errors: list[FieldError] = []
    if target == S.LOST:
        if not (aux.loss_reason or "").strip():
            errors.append(FieldError("lossReason", "Loss reason is required when marking enquiry as lost"))
        elif aux.loss_reason.strip() == OTHER_REASON and not (aux.notes or "").strip():
            errors.append(FieldError("notes", "Additional notes are required for the selected loss reason"))
    elif target == S.CLOSED:
        if not (aux.closure_reason or "").strip():
            errors.append(FieldError("closureReason", "Closure reason is required when closing enquiry"))
    elif target == S.QUOTATION_SENT:
        if aux.follow_up_date is None:
            errors.append(FieldError("followUpDate", "Follow-up date is required when sending quotation"))
        elif event_date is not None and aux.follow_up_date > event_date:
            errors.append(FieldError("followUpDate", "Follow-up date cannot be after the event date"))
    return errors


def check_aux(target: EnquiryStatus, aux: StatusAuxData, event_date: date | None = None) -> None:
    errors = required_aux_errors(target, aux, event_date)
    if errors:
        raise ValidationError(errors)


def check_reopen(current: EnquiryStatus, reason: str | None, notes: str | None) -> str:
    """Validate a Reopen request and return the normalised reason."""
    if current not in REOPENABLE_STATUSES:
        raise TransitionIllegal(current.value, S.ONGOING.value)
    reason_value = (reason or "").strip()
    errors: list[FieldError] = []
    if not reason_value:
        errors.append(FieldError("reason", "Please select a reason for reopening the enquiry"))
    elif reason_value not in REOPEN_REASONS:
        errors.append(FieldError("reason", f"Unknown reopen reason: {reason_value}"))
    elif reason_value == OTHER_REASON and not (notes or "").strip():
        errors.append(FieldError("notes", "Additional notes are required for the selected reopen reason"))
    if errors:
        raise ValidationError(errors)
    return reason_value


def status_update_fields(target: EnquiryStatus, aux: StatusAuxData) -> dict[str, Any]:
    """Auxiliary fields written alongside the status, keyed as the store expects them."""
    fields: dict[str, Any] = {}
    if target == S.CLOSED:
        fields["closureReason"] = aux.closure_reason.strip()
    elif target == S.LOST:
        fields["lossReason"] = aux.loss_reason.strip()
        if aux.notes and aux.notes.strip():
            fields["lossReasonNotes"] = aux.notes.strip()
    elif target == S.QUOTATION_SENT:
        fields["followUpDate"] = aux.follow_up_date.isoformat()
        if aux.follow_up_notes:
            fields["followUpNotes"] = aux.follow_up_notes
    return fields
