from __future__ import annotations

from venuedesk.domain.entities.session import Session, to_calendar_date


def overlaps(a: Session, b: Session) -> bool:
    """
    True when both sessions occupy the same venue on the same calendar date
    with overlapping time windows. Windows are half-open, so back-to-back
    sessions (a.end_time == b.start_time) do not overlap. Sessions missing
    venue, date or times are not yet schedulable and never overlap.
    """
    if not (a.is_schedulable and b.is_schedulable):
        return False
    if a.venue != b.venue:
        return False
    if to_calendar_date(a.session_date) != to_calendar_date(b.session_date):
        return False
    # zero-padded HH:MM strings compare like minute-of-day integers
    return a.start_time < b.end_time and a.end_time > b.start_time


def overlap_window(a: Session, b: Session) -> tuple[str, str] | None:
    if not overlaps(a, b):
        return None
    return max(a.start_time, b.start_time), min(a.end_time, b.end_time)
