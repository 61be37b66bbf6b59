from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from venuedesk.domain.entities.booking import Booking, BookingDraft
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.follow_up import FollowUp, FollowUpDraft


class StoreUnavailable(RuntimeError):
    """Raised when the store cannot be reached, times out, or answers with a server error."""
    pass


class StoreCommitRejected(RuntimeError):
    """Raised when the store refuses a write because the record changed or the slot is taken."""
    pass


class RecordNotFound(LookupError):
    """Raised when the store has no record with the requested id."""
    pass


class PipelineStorePort(ABC):
    @abstractmethod
    def list_enquiries(self) -> list[Enquiry]:
        """All enquiries with embedded sessions."""
        raise NotImplementedError

    @abstractmethod
    def list_bookings(self) -> list[Booking]:
        """All bookings with embedded sessions."""
        raise NotImplementedError

    @abstractmethod
    def get_enquiry(self, enquiry_id: str) -> Enquiry | None:
        raise NotImplementedError

    @abstractmethod
    def update_enquiry_status(
        self,
        enquiry_id: str,
        status: EnquiryStatus,
        fields: dict[str, Any],
        expected_status: EnquiryStatus,
    ) -> Enquiry:
        """
        Write a status change plus its auxiliary fields.
        Must raise StoreCommitRejected if the stored status is no longer expected_status
        or the commit would double-book a venue.
        """
        raise NotImplementedError

    @abstractmethod
    def create_booking(self, draft: BookingDraft) -> Booking:
        """Create a booking. The store assigns id and booking number."""
        raise NotImplementedError

    @abstractmethod
    def reopen_enquiry(self, enquiry_id: str, reason: str, notes: str | None) -> Enquiry:
        """Return a lost/closed enquiry to ongoing."""
        raise NotImplementedError

    @abstractmethod
    def list_follow_ups(self, enquiry_id: str) -> list[FollowUp]:
        raise NotImplementedError

    @abstractmethod
    def create_follow_up(self, draft: FollowUpDraft) -> FollowUp:
        raise NotImplementedError

    @abstractmethod
    def complete_follow_up(self, follow_up_id: str) -> FollowUp:
        raise NotImplementedError

    @abstractmethod
    def complete_all_follow_ups(self, enquiry_id: str) -> int:
        """Mark every uncompleted follow-up of the enquiry completed. Returns how many changed."""
        raise NotImplementedError
