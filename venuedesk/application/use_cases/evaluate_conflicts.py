from __future__ import annotations

import logging
from typing import Sequence

from venuedesk.application.ports.pipeline_store import PipelineStorePort, StoreUnavailable
from venuedesk.application.utils.conflict_classifier import classify
from venuedesk.domain.entities.conflict import ConflictReport
from venuedesk.domain.entities.session import Session


class EvaluateConflictsUseCase:
    def __init__(self, store: PipelineStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def execute(self, candidate_sessions: Sequence[Session], owner_id: str | None) -> ConflictReport:
        """
        Read current enquiries and bookings and classify the candidate sessions.
        A failed read yields an availability-unknown report, never a clean one.
        """
        try:
            enquiries = self._store.list_enquiries()
            bookings = self._store.list_bookings()
        except StoreUnavailable as e:
            self._logger.warning("Availability check failed", extra={"owner_id": owner_id, "error": str(e)})
            return ConflictReport.unknown(str(e))

        report = classify(candidate_sessions, owner_id, enquiries, bookings)
        if report.has_conflict:
            self._logger.info(
                "Venue conflicts found",
                extra={"owner_id": owner_id, "blocking": report.blocking, "advisory": report.advisory},
            )
        return report
