from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ConflictSeverity(str, Enum):
    BLOCKING = "blocking"
    ADVISORY = "advisory"


@dataclass(frozen=True)
class ConflictDetail:
    severity: ConflictSeverity
    venue: str
    session_date: date
    candidate_session: str
    candidate_window: tuple[str, str]
    counterpart_window: tuple[str, str]
    overlap_window: tuple[str, str]
    counterpart_kind: str  # "booking" | "enquiry"
    counterpart_id: str
    counterpart_reference: str | None
    counterpart_client: str
    counterpart_status: str

    @property
    def message(self) -> str:
        return (
            f"{self.session_date.isoformat()} • {self.venue} • "
            f"{self.candidate_window[0]}-{self.candidate_window[1]} ↔ "
            f"{self.counterpart_window[0]}-{self.counterpart_window[1]} "
            f"({self.counterpart_client or self.counterpart_reference or self.counterpart_id} - {self.counterpart_status})"
        )


@dataclass(frozen=True)
class ConflictReport:
    blocking: bool = False
    advisory: bool = False
    details: tuple[ConflictDetail, ...] = ()
    availability_unknown: bool = False
    error: str | None = None

    @staticmethod
    def unknown(error: str) -> "ConflictReport":
        return ConflictReport(availability_unknown=True, error=error)

    @property
    def has_conflict(self) -> bool:
        return self.blocking or self.advisory

    @property
    def messages(self) -> list[str]:
        return [d.message for d in self.details]
