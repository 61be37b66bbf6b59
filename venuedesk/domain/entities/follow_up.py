from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

from venuedesk.domain.entities.session import normalize_time, to_calendar_date

DEFAULT_FOLLOW_UP_TIME = "12:00"


class FollowUpDueState(str, Enum):
    COMPLETED = "completed"
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class FollowUpDraft:
    enquiry_id: str
    follow_up_date: date | None
    follow_up_time: str = DEFAULT_FOLLOW_UP_TIME
    notes: str = ""
    repeat_follow_up: bool = False
    repeat_interval: int | None = None  # days
    repeat_end_date: date | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "enquiryId": self.enquiry_id,
            "followUpDate": self.follow_up_date.isoformat() if self.follow_up_date else None,
            "followUpTime": self.follow_up_time,
            "notes": self.notes,
            "repeatFollowUp": self.repeat_follow_up,
            "repeatInterval": self.repeat_interval if self.repeat_follow_up else None,
            "repeatEndDate": self.repeat_end_date.isoformat() if self.repeat_end_date else None,
        }


@dataclass(frozen=True)
class FollowUp:
    id: str
    enquiry_id: str
    follow_up_date: date
    follow_up_time: str = DEFAULT_FOLLOW_UP_TIME
    notes: str = ""
    completed: bool = False
    completed_at: datetime | None = None
    repeat_follow_up: bool = False
    repeat_interval: int | None = None
    repeat_end_date: date | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "enquiryId": self.enquiry_id,
            "followUpDate": self.follow_up_date.isoformat(),
            "followUpTime": self.follow_up_time,
            "notes": self.notes,
            "completed": self.completed,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "repeatFollowUp": self.repeat_follow_up,
            "repeatInterval": self.repeat_interval,
            "repeatEndDate": self.repeat_end_date.isoformat() if self.repeat_end_date else None,
        }

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> "FollowUp":
        raw_id = payload.get("id") or payload.get("_id")
        follow_up_date = to_calendar_date(payload.get("followUpDate") or payload.get("follow_up_date"))
        if not raw_id or follow_up_date is None:
            raise ValueError("Follow-up payload requires 'id' and 'followUpDate'.")
        completed_at = payload.get("completedAt") or payload.get("completed_at")
        if isinstance(completed_at, str):
            completed_at = datetime.fromisoformat(completed_at.replace("Z", "+00:00"))
        interval = payload.get("repeatInterval") or payload.get("repeat_interval")
        return FollowUp(
            id=str(raw_id),
            enquiry_id=str(payload.get("enquiryId") or payload.get("enquiry_id") or ""),
            follow_up_date=follow_up_date,
            follow_up_time=normalize_time(payload.get("followUpTime") or payload.get("follow_up_time"))
            or DEFAULT_FOLLOW_UP_TIME,
            notes=str(payload.get("notes") or ""),
            completed=bool(payload.get("completed", False)),
            completed_at=completed_at,
            repeat_follow_up=bool(payload.get("repeatFollowUp") or payload.get("repeat_follow_up")),
            repeat_interval=int(interval) if interval else None,
            repeat_end_date=to_calendar_date(payload.get("repeatEndDate") or payload.get("repeat_end_date")),
        )
