import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clinic_booking.api.v1.booking import router as booking_router
from clinic_booking.application.use_cases.session_cleanup import (
    close_all_sessions,
    sweep_sessions_periodically,
)
from clinic_booking.core.config import settings
from clinic_booking.wiring.dependencies import get_wizard_store

_CONTEXT_KEYS = (
    "session_id",
    "doctor_id",
    "date",
    "time",
    "step",
    "booking_id",
    "sessions",
    "status_code",
    "reason",
    "error",
)

# httpx logs every request at INFO.
_QUIET_LOGGERS = {"httpx": logging.WARNING, "httpcore": logging.WARNING}


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = [
            f"{key}={getattr(record, key)}"
            for key in _CONTEXT_KEYS
            if getattr(record, key, None) not in (None, "")
        ]
        return f"{base} | {' '.join(extras)}" if extras else base


def configure_logging(level_name: str) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = app.dependency_overrides.get(get_wizard_store, get_wizard_store)()
    sweeper = asyncio.create_task(
        sweep_sessions_periodically(store, settings.SESSION_SWEEP_INTERVAL_SECONDS),
        name="booking-session-sweep",
    )
    logger.info("Booking session sweep started")

    yield

    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    await close_all_sessions(store)
    logger.info("Booking API shutting down")


app = FastAPI(title="Clinic Appointment Booking", version="1.0.0", lifespan=lifespan)

app.include_router(booking_router, prefix="/api/v1/booking", tags=["booking"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
