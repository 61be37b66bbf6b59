import logging

from fastapi import FastAPI

from venuedesk.api.v1.follow_ups import router as follow_ups_router
from venuedesk.api.v1.quotations import router as quotations_router
from venuedesk.api.v1.scheduling import router as scheduling_router
from venuedesk.core.config import settings

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in (
            "enquiry_id", "target_status", "owner_id", "blocking", "advisory",
            "reason", "booking_number", "count", "error",
        ):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title="Venue Desk Scheduling Core", version="1.0.0")

app.include_router(scheduling_router, prefix="/api/v1", tags=["scheduling"])
app.include_router(follow_ups_router, prefix="/api/v1", tags=["follow-ups"])
app.include_router(quotations_router, prefix="/api/v1", tags=["quotations"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "store": settings.STORE_BACKEND}
