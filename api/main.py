"""
api/main.py -- FastAPI application entry point for NGO Manager.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- adds CORS headers for the origins in settings.cors_origins
  2. log_requests    -- one log line per request with status and latency

Lifespan builds every shared object once and hangs it on app.state:
  settings, credential_store, ngo_store, token_issuer, token_verifier.
Route handlers and auth dependencies read them from request.app.state; nothing
reads configuration from the environment after startup. A missing SECRET_KEY
in production raises ConfigurationError while the token services are built,
which aborts startup before the first request is served.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.admins import router as admins_router
from api.routes.v1.attendance import router as attendance_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.beneficiaries import router as beneficiaries_router
from api.routes.v1.donors import router as donors_router
from api.routes.v1.employees import router as employees_router
from api.routes.v1.events import router as events_router
from api.routes.v1.organizations import router as organizations_router
from api.routes.v1.projects import router as projects_router
from api.routes.v1.reports import router as reports_router
from api.routes.v1.users import router as users_router
from api.routes.v1.volunteers import router as volunteers_router
from auth.errors import AuthError
from auth.store import CredentialStore
from auth.tokens import TokenIssuer, TokenVerifier
from core.config import get_settings
from ngo.store import NGOStore

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("ngomanager.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build settings, stores and token services; dispose the engines on shutdown.

    The token services are built before the stores so a missing signing key
    fails startup without touching the database.
    """
    logger.info("NGO Manager API starting up")
    settings = get_settings()
    app.state.settings = settings
    app.state.token_issuer = TokenIssuer(settings)
    app.state.token_verifier = TokenVerifier(settings)
    app.state.credential_store = CredentialStore(settings.database_url)
    app.state.ngo_store = NGOStore(settings.database_url)
    logger.info(
        "Stores initialized (users_present=%s, self_registration=%s)",
        app.state.credential_store.has_users(),
        settings.self_registration_enabled,
    )

    yield

    app.state.ngo_store.close()
    app.state.credential_store.close()
    logger.info("NGO Manager API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="NGO Manager API",
    description="Donors, beneficiaries, volunteers, employees, events, projects and aid reports for NGOs.",
    version=__version__,
    lifespan=lifespan,
)

# CORS origins come from the environment, but middleware must be registered
# before the app starts, so this is the one settings read outside lifespan.
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


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

app.include_router(auth_router, tags=["Auth"])
app.include_router(admins_router, prefix="/api/admins", tags=["Admins"])
app.include_router(users_router, prefix="/api/users", tags=["Users"])
app.include_router(organizations_router, prefix="/api/organizations", tags=["Organizations"])
app.include_router(donors_router, prefix="/api/donors", tags=["Donors"])
app.include_router(beneficiaries_router, prefix="/api/beneficiaries", tags=["Beneficiaries"])
app.include_router(volunteers_router, prefix="/api/volunteers", tags=["Volunteers"])
app.include_router(employees_router, prefix="/api/employees", tags=["Employees"])
app.include_router(events_router, prefix="/api/events", tags=["Events"])
app.include_router(projects_router, prefix="/api/projects", tags=["Projects"])
app.include_router(reports_router, prefix="/api/reports", tags=["Reports"])
app.include_router(attendance_router, prefix="/api/volunteer-attendance", tags=["Volunteer attendance"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render any authentication or authorization failure.

    The body carries the class's static message only. exc.reason (expired vs.
    bad signature, which rule failed) was logged where it was raised and is
    never sent to the client.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with a {"code", "message"} dict as
    detail (see api/routes/v1/common.py). A dict detail is used as the error
    field directly; anything else is wrapped.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback goes to the log only. The client receives a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and database reachability. Public."""
    components = {"app": "ok"}
    try:
        request.app.state.credential_store.ping()
        components["database"] = "ok"
    except Exception:
        logger.exception("Health check: database unreachable")
        components["database"] = "unavailable"
    status = "healthy" if components["database"] == "ok" else "degraded"
    return HealthResponse(status=status, version=__version__, components=components)
