from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class VenueRentalLine:
    venue: str
    session_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class RoomLine:
    room_type: str
    rate: Decimal = Decimal("0")  # per room per night
    number_of_rooms: int = 1


@dataclass(frozen=True)
class MenuLine:
    package_name: str
    package_price: Decimal = Decimal("0")
    additional_prices: tuple[Decimal, ...] = ()
    quantity: int = 1


@dataclass(frozen=True)
class Discount:
    type: DiscountType
    value: Decimal


@dataclass(frozen=True)
class QuotationTotals:
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
    final_total: Decimal
