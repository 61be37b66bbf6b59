from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException
from venuedesk.api.v1.schemas import FollowUpCreateSchema, FollowUpListSchema, FollowUpSchema, follow_up_schema
from venuedesk.api.v1.scheduling import validation_detail
from venuedesk.wiring.dependencies import get_follow_up_use_case
from venuedesk.application.use_cases.follow_ups import ScheduleFollowUpUseCase
from venuedesk.application.exceptions import EnquiryNotFound, ValidationError
from venuedesk.application.ports.pipeline_store import RecordNotFound, StoreUnavailable
from venuedesk.core.config import settings
from venuedesk.domain.entities.follow_up import FollowUpDraft
from venuedesk.domain.entities.session import normalize_time

router = APIRouter()


def business_now() -> datetime:
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE))


@router.get("/enquiries/{enquiry_id}/follow-ups", response_model=FollowUpListSchema)
def list_follow_ups(
    enquiry_id: str,
    uc: ScheduleFollowUpUseCase = Depends(get_follow_up_use_case),
):
    try:
        scheduled = uc.list_for_enquiry(enquiry_id, now=business_now())
    except StoreUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))

    return FollowUpListSchema(follow_ups=[follow_up_schema(s.follow_up, s.due_state) for s in scheduled])


@router.post("/follow-ups", response_model=FollowUpListSchema, status_code=201)
def create_follow_up(
    req: FollowUpCreateSchema,
    uc: ScheduleFollowUpUseCase = Depends(get_follow_up_use_case),
):
    draft = FollowUpDraft(
        enquiry_id=req.enquiry_id,
        follow_up_date=req.follow_up_date,
        follow_up_time=normalize_time(req.follow_up_time) or settings.FOLLOW_UP_DEFAULT_TIME,
        notes=req.notes,
        repeat_follow_up=req.repeat_follow_up,
        repeat_interval=req.repeat_interval,
        repeat_end_date=req.repeat_end_date,
    )
    try:
        created = uc.create(draft)
    except EnquiryNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=validation_detail(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))

    return FollowUpListSchema(follow_ups=[follow_up_schema(f) for f in created])


@router.patch("/follow-ups/{follow_up_id}/complete", response_model=FollowUpSchema)
def complete_follow_up(
    follow_up_id: str,
    uc: ScheduleFollowUpUseCase = Depends(get_follow_up_use_case),
):
    try:
        follow_up = uc.complete(follow_up_id)
    except RecordNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))

    return follow_up_schema(follow_up)
