from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from venuedesk.api.v1.schemas import (
    EvaluateConflictsRequestSchema, ConflictReportSchema,
    StatusChangeRequestSchema, StatusChangeResponseSchema,
    ReopenRequestSchema, EnquirySchema,
    ConvertRequestSchema, BookingSchema,
    report_schema, enquiry_schema, follow_up_schema, booking_schema,
)
from venuedesk.wiring.dependencies import (
    get_evaluate_conflicts_use_case, get_change_status_use_case,
    get_reopen_use_case, get_convert_use_case,
)
from venuedesk.application.use_cases.evaluate_conflicts import EvaluateConflictsUseCase
from venuedesk.application.use_cases.change_status import RequestStatusChangeUseCase
from venuedesk.application.use_cases.reopen_enquiry import ReopenEnquiryUseCase
from venuedesk.application.use_cases.convert_to_booking import ConvertToBookingUseCase
from venuedesk.application.utils.status_guard import StatusAuxData
from venuedesk.application.exceptions import (
    ValidationError, TransitionIllegal, ConflictBlocking, ConflictAdvisory,
    StaleAvailability, EnquiryNotFound,
)
from venuedesk.application.ports.pipeline_store import StoreUnavailable, StoreCommitRejected, RecordNotFound
from venuedesk.domain.entities.session import Session

router = APIRouter()


def validation_detail(e: ValidationError) -> dict:
    return {"message": str(e), "errors": [{"field": fe.field, "message": fe.message} for fe in e.errors]}


def conflict_detail(e: ConflictBlocking | ConflictAdvisory | StaleAvailability) -> dict:
    return {
        "message": str(e),
        "bypassable": getattr(e, "bypassable", False),
        "report": report_schema(e.report).model_dump(mode="json"),
    }


@router.post("/conflicts/evaluate", response_model=ConflictReportSchema)
def evaluate_conflicts(
    req: EvaluateConflictsRequestSchema,
    uc: EvaluateConflictsUseCase = Depends(get_evaluate_conflicts_use_case),
):
    sessions = [Session.from_payload(s.model_dump()) for s in req.sessions]
    report = uc.execute(sessions, req.owner_id)
    body = report_schema(report)
    if report.availability_unknown:
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return body


@router.post("/enquiries/{enquiry_id}/status", response_model=StatusChangeResponseSchema)
def change_status(
    enquiry_id: str,
    req: StatusChangeRequestSchema,
    uc: RequestStatusChangeUseCase = Depends(get_change_status_use_case),
):
    aux = StatusAuxData(
        loss_reason=req.loss_reason,
        notes=req.notes,
        closure_reason=req.closure_reason,
        follow_up_date=req.follow_up_date,
        follow_up_notes=req.follow_up_notes,
    )
    try:
        result = uc.execute(
            enquiry_id,
            req.status,
            aux=aux,
            bypass_advisory=req.bypass_advisory,
            complete_follow_ups=req.complete_follow_ups,
        )
    except (EnquiryNotFound, RecordNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=validation_detail(e))
    except TransitionIllegal as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ConflictBlocking, ConflictAdvisory) as e:
        raise HTTPException(status_code=409, detail=conflict_detail(e))
    except StaleAvailability as e:
        raise HTTPException(status_code=503, detail=conflict_detail(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))

    return StatusChangeResponseSchema(
        action=result.action,
        enquiry=enquiry_schema(result.enquiry),
        target_status=result.target_status.value,
        report=report_schema(result.report) if result.report else None,
        pending_follow_ups=[follow_up_schema(f) for f in result.pending_follow_ups],
        completed_follow_ups=result.completed_follow_ups,
        advisory_overridden=result.advisory_overridden,
    )


@router.post("/enquiries/{enquiry_id}/reopen", response_model=EnquirySchema)
def reopen(
    enquiry_id: str,
    req: ReopenRequestSchema,
    uc: ReopenEnquiryUseCase = Depends(get_reopen_use_case),
):
    try:
        enquiry = uc.execute(enquiry_id, req.reason, req.notes)
    except (EnquiryNotFound, RecordNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=validation_detail(e))
    except TransitionIllegal as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreCommitRejected as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))

    return enquiry_schema(enquiry)


@router.post("/enquiries/{enquiry_id}/convert", response_model=BookingSchema)
def convert(
    enquiry_id: str,
    req: ConvertRequestSchema,
    uc: ConvertToBookingUseCase = Depends(get_convert_use_case),
):
    try:
        booking = uc.execute(
            enquiry_id,
            contract_signed=req.contract_signed,
            advance_received=req.advance_received,
            bypass_advisory=req.bypass_advisory,
            complete_follow_ups=req.complete_follow_ups,
        )
    except (EnquiryNotFound, RecordNotFound) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=validation_detail(e))
    except TransitionIllegal as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ConflictBlocking, ConflictAdvisory) as e:
        raise HTTPException(status_code=409, detail=conflict_detail(e))
    except StaleAvailability as e:
        raise HTTPException(status_code=503, detail=conflict_detail(e))
    except StoreUnavailable as e:
        raise HTTPException(status_code=502, detail=str(e))

    return booking_schema(booking)
