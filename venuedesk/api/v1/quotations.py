from decimal import Decimal

from fastapi import APIRouter, Depends
from venuedesk.api.v1.schemas import QuotationRequestSchema, QuotationTotalsSchema
from venuedesk.wiring.dependencies import get_gst_rates, get_discount_limit
from venuedesk.application.utils.quotation_calculator import GstRates, calculate_totals
from venuedesk.domain.entities.quotation import Discount, MenuLine, RoomLine, VenueRentalLine

router = APIRouter()


@router.post("/quotations/calculate", response_model=QuotationTotalsSchema)
def calculate(
    req: QuotationRequestSchema,
    rates: GstRates = Depends(get_gst_rates),
    discount_limit: Decimal = Depends(get_discount_limit),
):
    totals = calculate_totals(
        venue_lines=[VenueRentalLine(venue=v.venue, session_rate=v.session_rate) for v in req.venues],
        room_lines=[
            RoomLine(room_type=r.room_type, rate=r.rate, number_of_rooms=r.number_of_rooms) for r in req.rooms
        ],
        menu_lines=[
            MenuLine(
                package_name=m.package_name,
                package_price=m.package_price,
                additional_prices=tuple(m.additional_prices),
                quantity=m.quantity,
            )
            for m in req.menus
        ],
        include_gst=req.include_gst,
        discount=Discount(type=req.discount.type, value=req.discount.value) if req.discount else None,
        discount_limit_percent=discount_limit,
        rates=rates,
    )
    return QuotationTotalsSchema(
        venue_base=totals.venue_base,
        venue_gst=totals.venue_gst,
        venue_total=totals.venue_total,
        room_base=totals.room_base,
        room_gst=totals.room_gst,
        room_total=totals.room_total,
        menu_base=totals.menu_base,
        menu_gst=totals.menu_gst,
        menu_total=totals.menu_total,
        base_total=totals.base_total,
        total_gst=totals.total_gst,
        grand_total=totals.grand_total,
        discount_amount=totals.discount_amount,
        discount_percent=totals.discount_percent,
        discount_exceeds_limit=totals.discount_exceeds_limit,
        discount_limit_percent=discount_limit,
        final_total=totals.final_total,
    )
