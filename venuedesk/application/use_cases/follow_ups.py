from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from venuedesk.application.exceptions import EnquiryNotFound, ValidationError
from venuedesk.application.ports.pipeline_store import PipelineStorePort
from venuedesk.application.utils.follow_up_schedule import (
    MAX_REPEAT_OCCURRENCES,
    due_state,
    expand_repeats,
    validate_follow_up,
)
from venuedesk.domain.entities.follow_up import FollowUp, FollowUpDraft, FollowUpDueState


@dataclass(frozen=True)
class ScheduledFollowUp:
    follow_up: FollowUp
    due_state: FollowUpDueState


class ScheduleFollowUpUseCase:
    def __init__(self, store: PipelineStorePort, max_repeats: int = MAX_REPEAT_OCCURRENCES) -> None:
        self._store = store
        self._max_repeats = max_repeats
        self._logger = logging.getLogger(__name__)

    def create(self, draft: FollowUpDraft) -> list[FollowUp]:
        """
        Create the reminder plus one record per repeat, each capped at the
        event date. Repeats are materialised as plain, non-repeating reminders.
        """
        enquiry = self._store.get_enquiry(draft.enquiry_id)
        if enquiry is None:
            raise EnquiryNotFound(draft.enquiry_id)

        errors = validate_follow_up(draft, enquiry.event_date)
        if errors:
            raise ValidationError(errors)

        created = [self._store.create_follow_up(draft)]
        if draft.repeat_follow_up:
            for follow_up_date in expand_repeats(
                draft.follow_up_date,
                draft.repeat_interval,
                repeat_end_date=draft.repeat_end_date,
                event_date=enquiry.event_date,
                max_occurrences=self._max_repeats,
            ):
                repeat = replace(
                    draft,
                    follow_up_date=follow_up_date,
                    repeat_follow_up=False,
                    repeat_interval=None,
                    repeat_end_date=None,
                )
                created.append(self._store.create_follow_up(repeat))

        self._logger.info(
            "Follow-ups scheduled",
            extra={"enquiry_id": draft.enquiry_id, "count": len(created)},
        )
        return created

    def complete(self, follow_up_id: str) -> FollowUp:
        return self._store.complete_follow_up(follow_up_id)

    def list_for_enquiry(self, enquiry_id: str, now: datetime) -> list[ScheduledFollowUp]:
        follow_ups = sorted(
            self._store.list_follow_ups(enquiry_id),
            key=lambda f: (f.follow_up_date, f.follow_up_time),
        )
        return [ScheduledFollowUp(follow_up=f, due_state=due_state(f, now)) for f in follow_ups]
