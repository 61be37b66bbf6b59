from __future__ import annotations

from venuedesk.domain.entities.conflict import ConflictReport
from venuedesk.domain.entities.session import FieldError


class SchedulingError(Exception):
    """Base class for failures surfaced by the scheduling core."""
    pass


class ValidationError(SchedulingError, ValueError):
    """Raised when required session or status fields are missing. Nothing is applied."""

    def __init__(self, errors: list[FieldError], message: str = "Validation failed") -> None:
        self.errors = list(errors)
        detail = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"{message}: {detail}" if detail else message)


class ConversionRejected(ValidationError):
    """Raised when an enquiry cannot be converted; carries every failed precondition."""

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__(errors, message="Booking conversion rejected")


class TransitionIllegal(SchedulingError):
    """Raised when a status edit is not in the transition table."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Illegal status transition: {current} -> {target}")


class ConflictBlocking(SchedulingError):
    """Raised when a session overlaps a committed record. Never bypassable."""

    bypassable = False

    def __init__(self, report: ConflictReport, message: str = "Venue conflict with a committed record") -> None:
        self.report = report
        super().__init__(message)


class ConflictAdvisory(SchedulingError):
    """Raised when a session overlaps a tentative enquiry and no bypass was supplied."""

    bypassable = True

    def __init__(self, report: ConflictReport) -> None:
        self.report = report
        super().__init__("Venue overlaps a tentative enquiry; confirm to proceed")


class StaleAvailability(SchedulingError):
    """Raised when current enquiries/bookings could not be read, so no conflict can be ruled out."""

    def __init__(self, report: ConflictReport) -> None:
        self.report = report
        super().__init__(f"Could not verify venue availability: {report.error}")


class StoreWriteConflict(ConflictBlocking):
    """Raised when the store rejected the final write because the slot was taken concurrently."""

    def __init__(self, report: ConflictReport) -> None:
        super().__init__(report, message="Venue was committed by another record; re-evaluate and retry")


class EnquiryNotFound(SchedulingError, LookupError):
    """Raised when the enquiry named by the caller does not exist."""

    def __init__(self, enquiry_id: str) -> None:
        self.enquiry_id = enquiry_id
        super().__init__(f"Enquiry not found: {enquiry_id}")
