import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import appointments, slots
from app.core.config import settings, _ENV_FILE
from app.core.db import init_db
from app.core.exceptions import SchedulingError

if os.getenv("ENV") != "production":
    logging.basicConfig(level=logging.DEBUG)
else:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}',
    )
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Loading .env from: %s (exists: %s)", _ENV_FILE, _ENV_FILE.exists())
    logger.info(
        "Clinic timezone %s, %d slots/day of %d min, booking window %d days",
        settings.clinic_timezone,
        settings.slots_per_day,
        settings.slot_duration_minutes,
        settings.booking_window_days,
    )
    if settings.auto_create_schema:
        await init_db()
        logger.info("Schema created and status catalog seeded")
    yield


app = FastAPI(
    title="Cardiology Scheduling API",
    description="Appointment scheduling between doctors and patients",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Actor-Id", "X-Actor-Role"],
)

app.include_router(slots.router, prefix="/api/v1")
app.include_router(appointments.router, prefix="/api/v1")


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Add CORS headers to error responses so the browser doesn't block them."""
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, X-Actor-Id, X-Actor-Role",
    }
    if origin and origin in settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = origin
    elif settings.cors_origins_list:
        headers["Access-Control-Allow-Origin"] = settings.cors_origins_list[0]
    return headers


@app.exception_handler(SchedulingError)
async def scheduling_exception_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    """Map scheduling failures to their status code with a stable error kind."""
    if exc.status_code >= 500:
        logger.error("Scheduling misconfiguration: %s", exc.message)
    else:
        logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.message, exc.kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
        headers=_cors_headers(request.headers.get("origin")),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return errors as JSON with CORS headers so browsers can read 500 responses.

    Exception text is only exposed in development; elsewhere it stays in the log.
    """
    origin = request.headers.get("origin")
    headers = _cors_headers(origin)
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers,
        )
    logger.exception("Unhandled exception: %s", exc)
    if settings.env == "development":
        detail = f"{type(exc).__name__}: {str(exc)}"
    else:
        detail = "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
        headers=headers,
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
