"""
eventscout.api.main — FastAPI application entry point
======================================================

Run with::

    python -m eventscout
    # or
    uvicorn eventscout.api.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from eventscout.api.auth import router as auth_router  # noqa: E402
from eventscout.api.deps import get_engine  # noqa: E402
from eventscout.api.routes.bookmarks import router as bookmarks_router  # noqa: E402
from eventscout.api.routes.categories import router as categories_router  # noqa: E402
from eventscout.api.routes.events import router as events_router  # noqa: E402
from eventscout.api.routes.users import router as users_router  # noqa: E402
from eventscout.database.engine import init_db  # noqa: E402
from eventscout.errors import EventScoutError  # noqa: E402

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Internal server error"


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


def _validation_message(exc: RequestValidationError) -> str:
    """First validation problem as a short human sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    fields = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
    msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
    if not fields:
        return msg
    if err.get("type") == "missing":
        return f"{fields[-1]} is required"
    return f"{fields[-1]}: {msg}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine and ensure the schema."""
    engine = get_engine()
    init_db(engine)
    logger.info("EventScout API started — engine ready (%s)", engine.url.database)
    yield
    engine.dispose()
    logger.info("EventScout API shutting down")


app = FastAPI(
    title="EventScout API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request log
# ---------------------------------------------------------------------------
@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s → %d (%.1f ms)",
        request.method, request.url.path, response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


# ---------------------------------------------------------------------------
# Error mapping: every error body is {"error": <message>}
# ---------------------------------------------------------------------------
@app.exception_handler(EventScoutError)
async def handle_domain_error(request: Request, exc: EventScoutError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})


# Mount routers
app.include_router(auth_router, prefix="/api")
app.include_router(events_router, prefix="/api")
app.include_router(categories_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(bookmarks_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}
