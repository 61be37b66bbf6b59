from decimal import Decimal
from functools import lru_cache
import logging

from fastapi import Depends

from venuedesk.application.ports.pipeline_store import PipelineStorePort
from venuedesk.application.use_cases.change_status import RequestStatusChangeUseCase
from venuedesk.application.use_cases.convert_to_booking import ConvertToBookingUseCase
from venuedesk.application.use_cases.evaluate_conflicts import EvaluateConflictsUseCase
from venuedesk.application.use_cases.follow_ups import ScheduleFollowUpUseCase
from venuedesk.application.use_cases.reopen_enquiry import ReopenEnquiryUseCase
from venuedesk.application.utils.quotation_calculator import GstRates
from venuedesk.core.config import settings
from venuedesk.infrastructure.store.http_store import HttpPipelineStore
from venuedesk.infrastructure.store.json_store import JsonPipelineStore
from venuedesk.infrastructure.store.memory_store import MemoryPipelineStore


_store: PipelineStorePort | None = None


def get_store() -> PipelineStorePort:
    global _store
    if _store is None:
        logger = logging.getLogger(__name__)
        backend = settings.STORE_BACKEND.lower()
        if backend == "http":
            _store = HttpPipelineStore()
        elif backend == "json":
            _store = JsonPipelineStore(data_path=settings.STORE_DATA_PATH)
        else:
            _store = MemoryPipelineStore()
        logger.info("Pipeline store backend=%s ENV=%s", backend, settings.ENV)
    return _store


def get_evaluate_conflicts_use_case(store: PipelineStorePort = Depends(get_store)) -> EvaluateConflictsUseCase:
    return EvaluateConflictsUseCase(store=store)


def get_change_status_use_case(store: PipelineStorePort = Depends(get_store)) -> RequestStatusChangeUseCase:
    return RequestStatusChangeUseCase(store=store, evaluate_conflicts=EvaluateConflictsUseCase(store=store))


def get_reopen_use_case(store: PipelineStorePort = Depends(get_store)) -> ReopenEnquiryUseCase:
    return ReopenEnquiryUseCase(store=store)


def get_convert_use_case(store: PipelineStorePort = Depends(get_store)) -> ConvertToBookingUseCase:
    evaluate_conflicts = EvaluateConflictsUseCase(store=store)
    return ConvertToBookingUseCase(
        store=store,
        evaluate_conflicts=evaluate_conflicts,
        change_status=RequestStatusChangeUseCase(store=store, evaluate_conflicts=evaluate_conflicts),
    )


def get_follow_up_use_case(store: PipelineStorePort = Depends(get_store)) -> ScheduleFollowUpUseCase:
    return ScheduleFollowUpUseCase(store=store, max_repeats=settings.FOLLOW_UP_MAX_REPEATS)


@lru_cache
def get_gst_rates() -> GstRates:
    return GstRates(
        venue=Decimal(str(settings.VENUE_GST_RATE)),
        menu=Decimal(str(settings.MENU_GST_RATE)),
        room_low=Decimal(str(settings.ROOM_GST_LOW_RATE)),
        room_high=Decimal(str(settings.ROOM_GST_HIGH_RATE)),
        room_threshold=Decimal(str(settings.ROOM_GST_THRESHOLD)),
    )


def get_discount_limit() -> Decimal:
    return Decimal(str(settings.DISCOUNT_LIMIT_PERCENT))
