from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]?\d)$")


class Venue(str, Enum):
    ARECA_I = "Areca I - The Banquet Hall"
    ARECA_II = "Areca II"
    OASIS_LAWN = "Oasis - The Lawn"
    POOLSIDE_LAWN = "Pool-side Lawn"
    THIRD_FLOOR_LOUNGE = "3rd floor Lounge"
    BOARD_ROOM = "Board Room"
    AMBER_RESTAURANT = "Amber Restaurant"
    SWAY_LOUNGE_BAR = "Sway Lounge Bar"


VENUE_NAMES = frozenset(v.value for v in Venue)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def to_calendar_date(value: Any) -> date | None:
    """Reduce a date, datetime or ISO string to a time-zone-naive calendar date.

    The date part is taken as written; an embedded time-of-day or offset is
    discarded rather than converted.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    match = re.match(r"^(\d{4})-(\d{1,2})-(\d{1,2})", text)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def normalize_time(value: Any) -> str | None:
    """Zero-pad "9:5" style times to "09:05". Unparseable input is returned stripped."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    match = TIME_PATTERN.match(text)
    if not match:
        return text
    return f"{int(match.group(1)):02d}:{int(match.group(2)):02d}"


def _pick(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


@dataclass(frozen=True)
class Session:
    id: str | None = None
    session_name: str = ""
    venue: str = ""
    session_date: date | None = None
    start_time: str | None = None
    end_time: str | None = None
    session_label: str | None = None
    pax_count: int = 0
    special_instructions: str | None = None

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "Session":
        raw_id = _pick(payload, "id", "_id")
        venue = _pick(payload, "venue")
        if isinstance(venue, Enum):
            venue = venue.value
        try:
            pax = int(_pick(payload, "paxCount", "pax_count") or 0)
        except (TypeError, ValueError):
            pax = 0
        return Session(
            id=str(raw_id) if raw_id is not None else None,
            session_name=str(_pick(payload, "sessionName", "session_name") or "").strip(),
            venue=str(venue or "").strip(),
            session_date=to_calendar_date(_pick(payload, "sessionDate", "session_date")),
            start_time=normalize_time(_pick(payload, "startTime", "start_time")),
            end_time=normalize_time(_pick(payload, "endTime", "end_time")),
            session_label=_pick(payload, "sessionLabel", "session_label"),
            pax_count=pax,
            special_instructions=_pick(payload, "specialInstructions", "special_instructions"),
        )

    @property
    def is_schedulable(self) -> bool:
        return bool(self.venue and self.session_date and self.start_time and self.end_time)

    def validation_errors(self, prefix: str = "") -> list[FieldError]:
        errors: list[FieldError] = []
        if not self.session_name:
            errors.append(FieldError(f"{prefix}sessionName", "Session name is required"))
        if not self.venue:
            errors.append(FieldError(f"{prefix}venue", "Venue is required"))
        elif self.venue not in VENUE_NAMES:
            errors.append(FieldError(f"{prefix}venue", f"Unknown venue: {self.venue}"))
        if self.session_date is None:
            errors.append(FieldError(f"{prefix}sessionDate", "Session date is required"))

        times_ok = True
        for key, value in (("startTime", self.start_time), ("endTime", self.end_time)):
            label = "Start time" if key == "startTime" else "End time"
            if not value:
                errors.append(FieldError(f"{prefix}{key}", f"{label} is required"))
                times_ok = False
            elif not TIME_PATTERN.match(value):
                errors.append(FieldError(f"{prefix}{key}", f"{label} must be in HH:MM format (24-hour)"))
                times_ok = False

        if times_ok and self.start_time >= self.end_time:
            errors.append(FieldError(f"{prefix}endTime", "End time must be after start time"))
        return errors

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sessionName": self.session_name,
            "sessionLabel": self.session_label,
            "venue": self.venue,
            "sessionDate": self.session_date.isoformat() if self.session_date else None,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "paxCount": self.pax_count,
            "specialInstructions": self.special_instructions,
        }
        if self.id is not None:
            payload["id"] = self.id
        return payload
