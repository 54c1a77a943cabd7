"""
api/main.py -- FastAPI application entry point for StaffLogin.

Run with:  uvicorn api.main:app --reload
           python main.py serve

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan opens the StaffStore on startup and disposes of it on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorResponse, HealthResponse
from api.routes.login import router as login_router
from auth.store import StaffStore
from core.config import get_settings
from core.models import RequestErrorTypes, SystemErrorTypes

__version__ = "1.0.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("stafflogin.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the staff database for the lifetime of the server."""
    logger.info("StaffLogin API starting up")
    app.state.staff_store = StaffStore(_settings.database_url)
    logger.info("Staff store initialized")

    yield

    app.state.staff_store.close()
    logger.info("StaffLogin API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="StaffLogin API",
    description="Authentication for Personal Administrativo accounts.",
    version=__version__,
    lifespan=lifespan,
    # Interactive docs are only served in development.
    docs_url="/docs" if _settings.debug else None,
    redoc_url=None,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(login_router, prefix="/api", tags=["Login"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope
# ({"success": false, "message", "errorType", "details"?}) so clients can
# branch on errorType without inspecting status codes.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str, error_type: str, details: dict | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, errorType=error_type, details=details)
    response = JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a Retry-After header when a rate limit is exceeded.

    Plain def: SlowAPIMiddleware calls this handler synchronously.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error(
        429,
        "Demasiados intentos, por favor intente más tarde",
        RequestErrorTypes.TOO_MANY_REQUESTS.value,
        {"limit": str(exc.detail)},
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies (invalid JSON, wrong types, over-long fields) are a 400."""
    return _error(
        400,
        "Los parámetros de la solicitud no son válidos",
        RequestErrorTypes.INVALID_PARAMETERS.value,
        {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        error_type = RequestErrorTypes.NOT_FOUND.value
    elif exc.status_code == 405:
        error_type = RequestErrorTypes.METHOD_NOT_ALLOWED.value
    else:
        error_type = SystemErrorTypes.UNKNOWN_ERROR.value
    return _error(exc.status_code, str(exc.detail), error_type)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The exception text is only echoed back in debug mode; production clients
    get the generic message and the traceback goes to the log.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    details = {"error": str(exc)} if _settings.debug else None
    return _error(
        500,
        "Error en el servidor, por favor intente más tarde",
        SystemErrorTypes.UNKNOWN_ERROR.value,
        details,
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# No rate limit -- load balancer probes must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return API liveness, version and database reachability."""
    try:
        db_status = "ok" if request.app.state.staff_store.ping() else "error"
    except Exception:
        logger.exception("Health check: database unreachable")
        db_status = "error"
    status = "healthy" if db_status == "ok" else "degraded"
    return HealthResponse(status=status, version=__version__, components={"app": "ok", "database": db_status})
