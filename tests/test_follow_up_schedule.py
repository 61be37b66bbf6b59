"""
Tests for follow-up due states, repeats and scheduling.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from venuedesk.application.exceptions import EnquiryNotFound, ValidationError
from venuedesk.application.use_cases.follow_ups import ScheduleFollowUpUseCase
from venuedesk.application.utils.follow_up_schedule import due_state, expand_repeats, validate_follow_up
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.follow_up import FollowUp, FollowUpDraft, FollowUpDueState
from venuedesk.infrastructure.store.memory_store import MemoryPipelineStore

IST = ZoneInfo("Asia/Kolkata")
NOW = datetime(2025, 3, 1, 13, 0, tzinfo=IST)


def _follow_up(day: date, at: str = "12:00", completed: bool = False) -> FollowUp:
    return FollowUp(id="F1", enquiry_id="E1", follow_up_date=day, follow_up_time=at, completed=completed)


def test_due_states():
    assert due_state(_follow_up(date(2025, 3, 1), "12:00"), NOW) == FollowUpDueState.OVERDUE
    assert due_state(_follow_up(date(2025, 2, 28), "18:00"), NOW) == FollowUpDueState.OVERDUE
    assert due_state(_follow_up(date(2025, 3, 1), "15:00"), NOW) == FollowUpDueState.DUE_TODAY
    assert due_state(_follow_up(date(2025, 3, 2), "09:00"), NOW) == FollowUpDueState.UPCOMING
    assert due_state(_follow_up(date(2025, 2, 1), completed=True), NOW) == FollowUpDueState.COMPLETED


def test_repeats_stop_at_end_date_and_event():
    start = date(2025, 3, 1)

    assert expand_repeats(start, 7, event_date=date(2025, 3, 20)) == (date(2025, 3, 8), date(2025, 3, 15))
    assert expand_repeats(start, 7, repeat_end_date=date(2025, 3, 10), event_date=date(2025, 3, 20)) == (
        date(2025, 3, 8),
    )
    assert expand_repeats(start, None) == ()
    assert len(expand_repeats(start, 1)) == 52


def test_validation():
    event = date(2025, 3, 1)

    late = FollowUpDraft(enquiry_id="E1", follow_up_date=date(2025, 3, 2))
    assert [e.field for e in validate_follow_up(late, event)] == ["followUpDate"]

    bad_time = FollowUpDraft(enquiry_id="E1", follow_up_date=date(2025, 2, 1), follow_up_time="25:00")
    assert [e.field for e in validate_follow_up(bad_time, event)] == ["followUpTime"]

    no_interval = FollowUpDraft(enquiry_id="E1", follow_up_date=date(2025, 2, 1), repeat_follow_up=True)
    assert [e.field for e in validate_follow_up(no_interval, event)] == ["repeatInterval"]

    assert [e.field for e in validate_follow_up(FollowUpDraft(enquiry_id="E1", follow_up_date=None))] == [
        "followUpDate"
    ]


def test_schedule_materialises_repeats():
    store = MemoryPipelineStore(
        enquiries=[Enquiry(id="E1", status=EnquiryStatus.QUOTATION_SENT, event_date=date(2025, 3, 20))]
    )
    use_case = ScheduleFollowUpUseCase(store=store)

    created = use_case.create(
        FollowUpDraft(enquiry_id="E1", follow_up_date=date(2025, 3, 1), repeat_follow_up=True, repeat_interval=7)
    )

    assert [f.follow_up_date for f in created] == [date(2025, 3, 1), date(2025, 3, 8), date(2025, 3, 15)]
    assert created[0].repeat_follow_up
    assert not any(f.repeat_follow_up for f in created[1:])

    listed = use_case.list_for_enquiry("E1", now=datetime(2025, 3, 8, 9, 0, tzinfo=IST))
    assert [s.due_state for s in listed] == [
        FollowUpDueState.OVERDUE,
        FollowUpDueState.DUE_TODAY,
        FollowUpDueState.UPCOMING,
    ]

    done = use_case.complete(created[0].id)
    assert done.completed
    assert done.completed_at is not None


def test_schedule_rejects_follow_up_after_event():
    store = MemoryPipelineStore(enquiries=[Enquiry(id="E1", event_date=date(2025, 3, 1))])

    with pytest.raises(ValidationError):
        ScheduleFollowUpUseCase(store=store).create(FollowUpDraft(enquiry_id="E1", follow_up_date=date(2025, 3, 5)))

    assert store.list_follow_ups("E1") == []


def test_schedule_for_unknown_enquiry():
    with pytest.raises(EnquiryNotFound):
        ScheduleFollowUpUseCase(store=MemoryPipelineStore()).create(
            FollowUpDraft(enquiry_id="missing", follow_up_date=date(2025, 3, 1))
        )
