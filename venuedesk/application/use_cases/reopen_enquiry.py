from __future__ import annotations

import logging

from venuedesk.application.exceptions import EnquiryNotFound
from venuedesk.application.ports.pipeline_store import PipelineStorePort
from venuedesk.application.utils.status_guard import check_reopen
from venuedesk.domain.entities.enquiry import Enquiry


class ReopenEnquiryUseCase:
    def __init__(self, store: PipelineStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    def execute(self, enquiry_id: str, reason: str | None, notes: str | None = None) -> Enquiry:
        enquiry = self._store.get_enquiry(enquiry_id)
        if enquiry is None:
            raise EnquiryNotFound(enquiry_id)

        reason_value = check_reopen(enquiry.status, reason, notes)
        reopened = self._store.reopen_enquiry(enquiry.id, reason_value, (notes or "").strip() or None)
        self._logger.info("Enquiry reopened", extra={"enquiry_id": enquiry.id, "reason": reason_value})
        return reopened
