from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from venuedesk.domain.entities.quotation import (
    Discount,
    DiscountType,
    MenuLine,
    QuotationTotals,
    RoomLine,
    VenueRentalLine,
)

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class GstRates:
    venue: Decimal = Decimal("0.18")
    menu: Decimal = Decimal("0.18")
    room_low: Decimal = Decimal("0.05")
    room_high: Decimal = Decimal("0.18")
    room_threshold: Decimal = Decimal("7500")  # nightly rate at or below which room_low applies


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def room_gst_rate(rate: Decimal, rates: GstRates) -> Decimal:
    return rates.room_high if rate > rates.room_threshold else rates.room_low


def calculate_totals(
    venue_lines: Sequence[VenueRentalLine] = (),
    room_lines: Sequence[RoomLine] = (),
    menu_lines: Sequence[MenuLine] = (),
    include_gst: bool = False,
    discount: Discount | None = None,
    discount_limit_percent: Decimal = Decimal("10"),
    rates: GstRates | None = None,
) -> QuotationTotals:
    """
    Base totals, then GST per category, then the grand total, then the
    discount on the grand total. Each stage is rounded to paise before the
    next one reads it.
    """
    rates = rates or GstRates()

    venue_base = _money(sum((line.session_rate for line in venue_lines), ZERO))
    venue_gst = _money(venue_base * rates.venue) if include_gst else ZERO

    room_base = ZERO
    room_gst = ZERO
    for line in room_lines:
        line_total = line.rate * max(1, line.number_of_rooms)
        room_base += line_total
        if include_gst:
            room_gst += line_total * room_gst_rate(line.rate, rates)
    room_base = _money(room_base)
    room_gst = _money(room_gst)

    menu_base = ZERO
    for line in menu_lines:
        per_unit = line.package_price + sum(line.additional_prices, ZERO)
        menu_base += per_unit * max(1, line.quantity)
    menu_base = _money(menu_base)
    menu_gst = _money(menu_base * rates.menu) if include_gst else ZERO

    venue_total = venue_base + venue_gst
    room_total = room_base + room_gst
    menu_total = menu_base + menu_gst
    grand_total = venue_total + room_total + menu_total

    discount_amount = ZERO
    if discount is not None and discount.value > ZERO:
        if discount.type == DiscountType.PERCENTAGE:
            discount_amount = _money(grand_total * min(discount.value, HUNDRED) / HUNDRED)
        else:
            discount_amount = _money(min(discount.value, grand_total))

    discount_percent = _money(discount_amount / grand_total * HUNDRED) if grand_total > ZERO else ZERO

    return QuotationTotals(
        venue_base=venue_base,
        venue_gst=venue_gst,
        venue_total=venue_total,
        room_base=room_base,
        room_gst=room_gst,
        room_total=room_total,
        menu_base=menu_base,
        menu_gst=menu_gst,
        menu_total=menu_total,
        base_total=venue_base + room_base + menu_base,
        total_gst=venue_gst + room_gst + menu_gst,
        grand_total=grand_total,
        discount_amount=discount_amount,
        discount_percent=discount_percent,
        discount_exceeds_limit=discount_percent > discount_limit_percent,
        final_total=grand_total - discount_amount,
    )
