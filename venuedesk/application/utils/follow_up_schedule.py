from __future__ import annotations

from datetime import date, datetime, time, timedelta

from venuedesk.domain.entities.follow_up import (
    DEFAULT_FOLLOW_UP_TIME,
    FollowUp,
    FollowUpDraft,
    FollowUpDueState,
)
from venuedesk.domain.entities.session import TIME_PATTERN, FieldError

MAX_REPEAT_OCCURRENCES = 52


def _scheduled_at(follow_up_date: date, follow_up_time: str | None, tzinfo=None) -> datetime:
    match = TIME_PATTERN.match(follow_up_time or DEFAULT_FOLLOW_UP_TIME)
    if not match:
        match = TIME_PATTERN.match(DEFAULT_FOLLOW_UP_TIME)
    at = time(hour=int(match.group(1)), minute=int(match.group(2)))
    return datetime.combine(follow_up_date, at, tzinfo=tzinfo)


def due_state(follow_up: FollowUp, now: datetime) -> FollowUpDueState:
    """
    Completed wins. Otherwise a follow-up whose scheduled moment has passed is
    overdue, one scheduled later today is due today, anything else upcoming.
    The scheduled moment is read in the time zone of `now`.
    """
    if follow_up.completed:
        return FollowUpDueState.COMPLETED
    scheduled = _scheduled_at(follow_up.follow_up_date, follow_up.follow_up_time, now.tzinfo)
    if scheduled < now:
        return FollowUpDueState.OVERDUE
    if follow_up.follow_up_date == now.date():
        return FollowUpDueState.DUE_TODAY
    return FollowUpDueState.UPCOMING


def expand_repeats(
    follow_up_date: date,
    repeat_interval: int | None,
    repeat_end_date: date | None = None,
    event_date: date | None = None,
    max_occurrences: int = MAX_REPEAT_OCCURRENCES,
) -> tuple[date, ...]:
    """Dates of the repeats after the first reminder, capped at the end date and the event date."""
    if not repeat_interval or repeat_interval < 1:
        return ()
    limits = [d for d in (repeat_end_date, event_date) if d is not None]
    last = min(limits) if limits else None

    dates: list[date] = []
    step = timedelta(days=repeat_interval)
    current = follow_up_date + step
    while len(dates) < max_occurrences and (last is None or current <= last):
        dates.append(current)
        current += step
    return tuple(dates)


def validate_follow_up(draft: FollowUpDraft, event_date: date | None = None) -> list[FieldError]:
    errors: list[FieldError] = []
    if draft.follow_up_date is None:
        errors.append(FieldError("followUpDate", "Follow-up date is required"))
    elif event_date is not None and draft.follow_up_date > event_date:
        errors.append(FieldError("followUpDate", "Follow-up date cannot be after the event date"))

    if draft.follow_up_time and not TIME_PATTERN.match(draft.follow_up_time):
        errors.append(FieldError("followUpTime", "Follow-up time must be in HH:MM format (24-hour)"))

    if draft.repeat_follow_up:
        if not draft.repeat_interval or draft.repeat_interval < 1:
            errors.append(FieldError("repeatInterval", "Repeat interval must be at least 1 day"))
        if draft.repeat_end_date is not None:
            if draft.follow_up_date is not None and draft.repeat_end_date < draft.follow_up_date:
                errors.append(FieldError("repeatEndDate", "Repeat end date cannot be before the follow-up date"))
            if event_date is not None and draft.repeat_end_date > event_date:
                errors.append(FieldError("repeatEndDate", "Repeat end date cannot be after the event date"))
    return errors
