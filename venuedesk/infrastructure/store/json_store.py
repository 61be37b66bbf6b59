from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from venuedesk.domain.entities.booking import Booking
from venuedesk.domain.entities.enquiry import Enquiry
from venuedesk.domain.entities.follow_up import FollowUp
from venuedesk.infrastructure.store.memory_store import MemoryPipelineStore

SNAPSHOT_VERSION = 1


class JsonPipelineStore(MemoryPipelineStore):
    """MemoryPipelineStore whose state is written to one JSON file after every commit."""

    def __init__(self, data_path: str = "./data/pipeline.json") -> None:
        self._path = Path(data_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger(__name__)

        data = self._load()
        super().__init__(
            enquiries=[Enquiry.from_payload(p) for p in data.get("enquiries", [])],
            bookings=[Booking.from_payload(p) for p in data.get("bookings", [])],
            follow_ups=[FollowUp.from_payload(p) for p in data.get("follow_ups", [])],
        )

    def _load(self) -> dict[str, Any]:
        """Load the snapshot, return an empty one if the file is missing or unreadable."""
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            self._logger.error("Pipeline snapshot unreadable, starting empty", extra={"error": str(e)})
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def _after_write(self) -> None:
        data = {
            "version": SNAPSHOT_VERSION,
            "enquiries": [e.to_payload() for e in self._enquiries.values()],
            "bookings": [b.to_payload() for b in self._bookings.values()],
            "follow_ups": [f.to_payload() for f in self._follow_ups.values()],
        }
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            # atomic rename
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise
