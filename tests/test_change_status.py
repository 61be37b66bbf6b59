"""
Tests for requesting enquiry status changes against an in-memory store.
"""

from __future__ import annotations

from datetime import date

import pytest

from venuedesk.application.exceptions import (
    ConflictAdvisory,
    ConflictBlocking,
    EnquiryNotFound,
    StaleAvailability,
    StoreWriteConflict,
)
from venuedesk.application.ports.pipeline_store import StoreUnavailable
from venuedesk.application.use_cases.change_status import RequestStatusChangeUseCase
from venuedesk.application.use_cases.evaluate_conflicts import EvaluateConflictsUseCase
from venuedesk.application.utils.status_guard import StatusAuxData
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.follow_up import FollowUpDraft
from venuedesk.domain.entities.session import Session, Venue
from venuedesk.infrastructure.store.memory_store import MemoryPipelineStore

HALL = Venue.ARECA_I.value
DAY = date(2025, 3, 1)


def _enquiry(enquiry_id: str, status: EnquiryStatus, start: str, end: str) -> Enquiry:
    return Enquiry(
        id=enquiry_id,
        status=status,
        sessions=(Session(session_name="Dinner", venue=HALL, session_date=DAY, start_time=start, end_time=end),),
        client_name=f"Client {enquiry_id}",
        event_date=DAY,
    )


def _use_case(store) -> RequestStatusChangeUseCase:
    return RequestStatusChangeUseCase(store=store, evaluate_conflicts=EvaluateConflictsUseCase(store=store))


class UnreadableBookingsStore(MemoryPipelineStore):
    def list_bookings(self):
        raise StoreUnavailable("bookings endpoint timed out")


class RacingStore(MemoryPipelineStore):
    """Commits a rival converted enquiry just before the status write lands."""

    def __init__(self, rival: Enquiry, **kwargs) -> None:
        super().__init__(**kwargs)
        self._rival = rival

    def update_enquiry_status(self, *args, **kwargs):
        self.add_enquiry(self._rival)
        return super().update_enquiry_status(*args, **kwargs)


def test_conversion_without_conflicts_is_accepted():
    store = MemoryPipelineStore(enquiries=[_enquiry("E1", EnquiryStatus.ONGOING, "10:00", "14:00")])

    result = _use_case(store).execute("E1", "converted")

    assert result.action == "accepted"
    assert result.enquiry.status == EnquiryStatus.CONVERTED
    assert store.get_enquiry("E1").status == EnquiryStatus.CONVERTED


def test_blocking_conflict_cannot_be_bypassed():
    e1 = _enquiry("E1", EnquiryStatus.CONVERTED, "10:00", "14:00")
    e2 = _enquiry("E2", EnquiryStatus.ONGOING, "13:00", "16:00")
    store = MemoryPipelineStore(enquiries=[e1, e2])

    with pytest.raises(ConflictBlocking) as exc:
        _use_case(store).execute("E2", EnquiryStatus.CONVERTED, bypass_advisory=True)

    assert exc.value.bypassable is False
    assert exc.value.report.blocking
    assert store.get_enquiry("E2").status == EnquiryStatus.ONGOING


def test_advisory_conflict_needs_confirmation():
    e1 = _enquiry("E1", EnquiryStatus.NEW, "10:00", "14:00")
    e2 = _enquiry("E2", EnquiryStatus.ONGOING, "13:00", "16:00")
    store = MemoryPipelineStore(enquiries=[e1, e2])
    use_case = _use_case(store)

    with pytest.raises(ConflictAdvisory) as exc:
        use_case.execute("E2", EnquiryStatus.CONVERTED)
    assert exc.value.bypassable is True
    assert store.get_enquiry("E2").status == EnquiryStatus.ONGOING

    result = use_case.execute("E2", EnquiryStatus.CONVERTED, bypass_advisory=True)
    assert result.action == "accepted"
    assert result.advisory_overridden
    assert store.get_enquiry("E2").status == EnquiryStatus.CONVERTED


def test_pending_follow_ups_are_confirmed_before_write():
    store = MemoryPipelineStore(enquiries=[_enquiry("E1", EnquiryStatus.ONGOING, "10:00", "14:00")])
    store.create_follow_up(FollowUpDraft(enquiry_id="E1", follow_up_date=date(2025, 2, 20)))
    use_case = _use_case(store)
    aux = StatusAuxData(loss_reason="budget")

    asked = use_case.execute("E1", EnquiryStatus.LOST, aux=aux)
    assert asked.action == "confirm_follow_ups"
    assert len(asked.pending_follow_ups) == 1
    assert store.get_enquiry("E1").status == EnquiryStatus.ONGOING

    done = use_case.execute("E1", EnquiryStatus.LOST, aux=aux, complete_follow_ups=True)
    assert done.action == "accepted"
    assert done.completed_follow_ups == 1
    assert all(f.completed for f in store.list_follow_ups("E1"))
    assert store.get_enquiry("E1").loss_reason == "budget"


def test_declining_follow_up_completion_leaves_them_open():
    store = MemoryPipelineStore(enquiries=[_enquiry("E1", EnquiryStatus.ONGOING, "10:00", "14:00")])
    store.create_follow_up(FollowUpDraft(enquiry_id="E1", follow_up_date=date(2025, 2, 20)))

    result = _use_case(store).execute(
        "E1", EnquiryStatus.LOST, aux=StatusAuxData(loss_reason="budget"), complete_follow_ups=False
    )

    assert result.action == "accepted"
    assert not any(f.completed for f in store.list_follow_ups("E1"))


def test_quotation_sent_records_follow_up_date():
    store = MemoryPipelineStore(enquiries=[_enquiry("E1", EnquiryStatus.NEW, "10:00", "14:00")])

    _use_case(store).execute(
        "E1", EnquiryStatus.QUOTATION_SENT, aux=StatusAuxData(follow_up_date=date(2025, 2, 15))
    )

    updated = store.get_enquiry("E1")
    assert updated.status == EnquiryStatus.QUOTATION_SENT
    assert updated.follow_up_date == date(2025, 2, 15)


def test_unreadable_availability_blocks_committing_status():
    store = UnreadableBookingsStore(enquiries=[_enquiry("E1", EnquiryStatus.ONGOING, "10:00", "14:00")])
    use_case = _use_case(store)

    with pytest.raises(StaleAvailability) as exc:
        use_case.execute("E1", EnquiryStatus.CONVERTED)
    assert exc.value.report.availability_unknown
    assert store.get_enquiry("E1").status == EnquiryStatus.ONGOING

    # non-committing targets do not read availability
    result = use_case.execute("E1", EnquiryStatus.LOST, aux=StatusAuxData(loss_reason="budget"))
    assert result.action == "accepted"


def test_concurrent_commit_is_rejected_at_write():
    rival = _enquiry("E9", EnquiryStatus.CONVERTED, "12:00", "15:00")
    store = RacingStore(rival=rival, enquiries=[_enquiry("E1", EnquiryStatus.ONGOING, "10:00", "14:00")])

    with pytest.raises(StoreWriteConflict) as exc:
        _use_case(store).execute("E1", EnquiryStatus.CONVERTED)

    assert isinstance(exc.value, ConflictBlocking)
    assert exc.value.report.blocking
    assert exc.value.report.details[0].counterpart_id == "E9"
    assert store.get_enquiry("E1").status == EnquiryStatus.ONGOING


def test_unknown_enquiry():
    with pytest.raises(EnquiryNotFound):
        _use_case(MemoryPipelineStore()).execute("missing", EnquiryStatus.LOST)
