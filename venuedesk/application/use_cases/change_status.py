from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from venuedesk.application.exceptions import (
    ConflictAdvisory,
    ConflictBlocking,
    EnquiryNotFound,
    StaleAvailability,
    StoreWriteConflict,
)
from venuedesk.application.ports.pipeline_store import PipelineStorePort, StoreCommitRejected
from venuedesk.application.use_cases.evaluate_conflicts import EvaluateConflictsUseCase
from venuedesk.application.utils.status_guard import (
    COMMITTING_STATUSES,
    StatusAuxData,
    check_aux,
    check_transition,
    status_update_fields,
)
from venuedesk.domain.entities.conflict import ConflictReport
from venuedesk.domain.entities.enquiry import Enquiry, EnquiryStatus
from venuedesk.domain.entities.follow_up import FollowUp
from venuedesk.domain.entities.session import Session


@dataclass(frozen=True)
class StatusChangeResult:
    action: str  # "accepted" | "confirm_follow_ups"
    enquiry: Enquiry
    target_status: EnquiryStatus
    report: ConflictReport | None = None
    pending_follow_ups: tuple[FollowUp, ...] = ()
    completed_follow_ups: int = 0
    advisory_overridden: bool = False


class RequestStatusChangeUseCase:
    def __init__(self, store: PipelineStorePort, evaluate_conflicts: EvaluateConflictsUseCase) -> None:
        self._store = store
        self._evaluate_conflicts = evaluate_conflicts
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        enquiry_id: str,
        target_status: EnquiryStatus | str,
        aux: StatusAuxData | None = None,
        bypass_advisory: bool = False,
        complete_follow_ups: bool | None = None,
        via_conversion: bool = False,
        candidate_sessions: Sequence[Session] | None = None,
    ) -> StatusChangeResult:
        """
        Validate and apply a status change.

        bypass_advisory acknowledges advisory conflicts for this call only.
        complete_follow_ups answers the pending follow-up question: None asks
        it (nothing is written), True completes them before the write, False
        leaves them open. candidate_sessions replaces the enquiry's own sessions
        in the conflict checks; conversion passes the committed booking's sessions.
        """
        aux = aux or StatusAuxData()
        enquiry = self._store.get_enquiry(enquiry_id)
        if enquiry is None:
            raise EnquiryNotFound(enquiry_id)
        sessions = tuple(candidate_sessions) if candidate_sessions is not None else enquiry.sessions

        target = check_transition(enquiry.status, target_status, via_conversion=via_conversion)
        check_aux(target, aux, event_date=enquiry.event_date)

        report: ConflictReport | None = None
        advisory_overridden = False
        if target in COMMITTING_STATUSES:
            report = self._check_availability(enquiry, target, sessions)
            if report.advisory:
                if not bypass_advisory:
                    raise ConflictAdvisory(report)
                advisory_overridden = True
                self._logger.warning(
                    "Advisory venue conflict overridden",
                    extra={
                        "enquiry_id": enquiry.id,
                        "target_status": target.value,
                        "reason": " | ".join(report.messages),
                    },
                )

        pending = tuple(f for f in self._store.list_follow_ups(enquiry.id) if not f.completed)
        if pending and complete_follow_ups is None:
            return StatusChangeResult(
                action="confirm_follow_ups",
                enquiry=enquiry,
                target_status=target,
                report=report,
                pending_follow_ups=pending,
            )

        completed = 0
        if pending and complete_follow_ups:
            completed = self._store.complete_all_follow_ups(enquiry.id)

        try:
            updated = self._store.update_enquiry_status(
                enquiry.id,
                target,
                status_update_fields(target, aux),
                expected_status=enquiry.status,
            )
        except StoreCommitRejected as e:
            self._logger.warning(
                "Status commit rejected by store",
                extra={"enquiry_id": enquiry.id, "target_status": target.value, "error": str(e)},
            )
            fresh = self._evaluate_conflicts.execute(sessions, enquiry.id)
            raise StoreWriteConflict(fresh)

        self._logger.info(
            "Enquiry status changed",
            extra={"enquiry_id": enquiry.id, "target_status": target.value},
        )
        return StatusChangeResult(
            action="accepted",
            enquiry=updated,
            target_status=target,
            report=report,
            completed_follow_ups=completed,
            advisory_overridden=advisory_overridden,
        )

    def _check_availability(
        self, enquiry: Enquiry, target: EnquiryStatus, sessions: Sequence[Session]
    ) -> ConflictReport:
        report = self._evaluate_conflicts.execute(sessions, enquiry.id)
        if report.availability_unknown:
            raise StaleAvailability(report)
        if report.blocking:
            self._logger.info(
                "Status change blocked by venue conflict",
                extra={"enquiry_id": enquiry.id, "target_status": target.value, "blocking": True},
            )
            raise ConflictBlocking(report)
        return report
