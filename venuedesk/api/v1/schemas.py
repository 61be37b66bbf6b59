from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from venuedesk.domain.entities.quotation import DiscountType


class SessionSchema(BaseModel):
    id: str | None = None
    session_name: str = ""
    venue: str = ""
    session_date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    session_label: str | None = None
    pax_count: int = 0
    special_instructions: str | None = None


class ConflictDetailSchema(BaseModel):
    severity: str
    venue: str
    session_date: date
    candidate_session: str
    candidate_window: list[str]
    counterpart_window: list[str]
    overlap_window: list[str]
    counterpart_kind: str
    counterpart_id: str
    counterpart_reference: str | None = None
    counterpart_client: str = ""
    counterpart_status: str
    message: str


class ConflictReportSchema(BaseModel):
    blocking: bool
    advisory: bool
    availability_unknown: bool = False
    error: str | None = None
    conflicts: list[ConflictDetailSchema] = Field(default_factory=list)


class EvaluateConflictsRequestSchema(BaseModel):
    owner_id: str | None = None
    sessions: list[SessionSchema] = Field(default_factory=list)


class EnquirySchema(BaseModel):
    id: str
    enquiry_number: str | None = None
    client_name: str = ""
    status: str
    event_date: date | None = None
    event_duration: int = 1
    follow_up_date: date | None = None
    closure_reason: str | None = None
    loss_reason: str | None = None
    notes: str | None = None
    sessions: list[SessionSchema] = Field(default_factory=list)


class FollowUpSchema(BaseModel):
    id: str
    enquiry_id: str
    follow_up_date: date
    follow_up_time: str
    notes: str = ""
    completed: bool = False
    completed_at: datetime | None = None
    repeat_follow_up: bool = False
    repeat_interval: int | None = None
    repeat_end_date: date | None = None
    due_state: str | None = None


class StatusChangeRequestSchema(BaseModel):
    status: str
    loss_reason: str | None = None
    notes: str | None = None
    closure_reason: str | None = None
    follow_up_date: date | None = None
    follow_up_notes: str | None = None
    bypass_advisory: bool = False
    complete_follow_ups: bool | None = None


class StatusChangeResponseSchema(BaseModel):
    action: str
    enquiry: EnquirySchema
    target_status: str
    report: ConflictReportSchema | None = None
    pending_follow_ups: list[FollowUpSchema] = Field(default_factory=list)
    completed_follow_ups: int = 0
    advisory_overridden: bool = False


class ReopenRequestSchema(BaseModel):
    reason: str | None = None
    notes: str | None = None


class ConvertRequestSchema(BaseModel):
    contract_signed: bool = False
    advance_received: bool = False
    bypass_advisory: bool = False
    complete_follow_ups: bool = True


class BookingSchema(BaseModel):
    id: str
    booking_number: str
    enquiry_id: str | None = None
    status: str
    client_name: str = ""
    event_date: date | None = None
    event_dates: list[date] = Field(default_factory=list)
    contract_signed_at: datetime | None = None
    sessions: list[SessionSchema] = Field(default_factory=list)


class FollowUpCreateSchema(BaseModel):
    enquiry_id: str
    follow_up_date: date | None = None
    follow_up_time: str | None = None
    notes: str = ""
    repeat_follow_up: bool = False
    repeat_interval: int | None = None
    repeat_end_date: date | None = None


class FollowUpListSchema(BaseModel):
    follow_ups: list[FollowUpSchema]


class VenueLineSchema(BaseModel):
    venue: str
    session_rate: Decimal = Decimal("0")


class RoomLineSchema(BaseModel):
    room_type: str
    rate: Decimal = Decimal("0")
    number_of_rooms: int = 1


class MenuLineSchema(BaseModel):
    package_name: str
    package_price: Decimal = Decimal("0")
    additional_prices: list[Decimal] = Field(default_factory=list)
    quantity: int = 1


class DiscountSchema(BaseModel):
    type: DiscountType
    value: Decimal = Field(ge=0)


class QuotationRequestSchema(BaseModel):
    venues: list[VenueLineSchema] = Field(default_factory=list)
    rooms: list[RoomLineSchema] = Field(default_factory=list)
    menus: list[MenuLineSchema] = Field(default_factory=list)
    include_gst: bool = False
    discount: DiscountSchema | None = None


class QuotationTotalsSchema(BaseModel):
    venue_base: Decimal
    venue_gst: Decimal
    venue_total: Decimal
    room_base: Decimal
    room_gst: Decimal
    room_total: Decimal
    menu_base: Decimal
    menu_gst: Decimal
    menu_total: Decimal
    base_total: Decimal
    total_gst: Decimal
    grand_total: Decimal
    discount_amount: Decimal
    discount_percent: Decimal
    discount_exceeds_limit: bool
    discount_limit_percent: Decimal
    final_total: Decimal


def session_schema(session) -> SessionSchema:
    return SessionSchema(
        id=session.id,
        session_name=session.session_name,
        venue=session.venue,
        session_date=session.session_date.isoformat() if session.session_date else None,
        start_time=session.start_time,
        end_time=session.end_time,
        session_label=session.session_label,
        pax_count=session.pax_count,
        special_instructions=session.special_instructions,
    )


def report_schema(report) -> ConflictReportSchema:
    return ConflictReportSchema(
        blocking=report.blocking,
        advisory=report.advisory,
        availability_unknown=report.availability_unknown,
        error=report.error,
        conflicts=[
            ConflictDetailSchema(
                severity=d.severity.value,
                venue=d.venue,
                session_date=d.session_date,
                candidate_session=d.candidate_session,
                candidate_window=list(d.candidate_window),
                counterpart_window=list(d.counterpart_window),
                overlap_window=list(d.overlap_window),
                counterpart_kind=d.counterpart_kind,
                counterpart_id=d.counterpart_id,
                counterpart_reference=d.counterpart_reference,
                counterpart_client=d.counterpart_client,
                counterpart_status=d.counterpart_status,
                message=d.message,
            )
            for d in report.details
        ],
    )


def enquiry_schema(enquiry) -> EnquirySchema:
    return EnquirySchema(
        id=enquiry.id,
        enquiry_number=enquiry.enquiry_number,
        client_name=enquiry.client_name,
        status=enquiry.status.value,
        event_date=enquiry.event_date,
        event_duration=enquiry.event_duration,
        follow_up_date=enquiry.follow_up_date,
        closure_reason=enquiry.closure_reason,
        loss_reason=enquiry.loss_reason,
        notes=enquiry.notes,
        sessions=[session_schema(s) for s in enquiry.sessions],
    )


def follow_up_schema(follow_up, due_state=None) -> FollowUpSchema:
    return FollowUpSchema(
        id=follow_up.id,
        enquiry_id=follow_up.enquiry_id,
        follow_up_date=follow_up.follow_up_date,
        follow_up_time=follow_up.follow_up_time,
        notes=follow_up.notes,
        completed=follow_up.completed,
        completed_at=follow_up.completed_at,
        repeat_follow_up=follow_up.repeat_follow_up,
        repeat_interval=follow_up.repeat_interval,
        repeat_end_date=follow_up.repeat_end_date,
        due_state=due_state.value if due_state else None,
    )


def booking_schema(booking) -> BookingSchema:
    return BookingSchema(
        id=booking.id,
        booking_number=booking.booking_number,
        enquiry_id=booking.enquiry_id,
        status=booking.status.value,
        client_name=booking.client_name,
        event_date=booking.event_date,
        event_dates=list(booking.event_dates),
        contract_signed_at=booking.contract_signed_at,
        sessions=[session_schema(s) for s in booking.sessions],
    )
