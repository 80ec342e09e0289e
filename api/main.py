"""
api/main.py -- FastAPI application entry point for the threat intel backend.

Run with:  uvicorn asgi:app --reload
           python main.py serve

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins

Every router is included with the process-wide rate limit dependency from
api.limiter; /health sits outside the routers and is never counted.

Lifespan builds the stores, the token service and the two use-case services
on app.state at startup, and disposes the database engines on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.limiter import rate_limit
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.admin import admin_router, analyst_router
from api.routes.v1.auth import router as auth_router
from api.routes.v1.orders import router as orders_router
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import get_token_service
from core.config import get_settings
from core.errors import ServiceError
from orders.service import OrderService
from orders.store import OrderStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("threatintel.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build application-level collaborators and tear them down symmetrically.

    Startup order matters: stores first, then the token service, then the
    services that compose them.
    """
    logger.info("%s starting up", _settings.service_name)
    app.state.user_store = UserStore(_settings.database_url)
    app.state.order_store = OrderStore(_settings.database_url)
    logger.info("Stores initialized")
    app.state.tokens = get_token_service()
    app.state.auth_service = AuthService(app.state.user_store, app.state.tokens)
    app.state.order_service = OrderService(app.state.order_store, app.state.user_store)

    yield

    app.state.order_store.close()
    app.state.user_store.close()
    logger.info("%s shutdown complete", _settings.service_name)


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Threat Intel API",
    description="Authenticated ordering of threat intelligence catalog items.",
    version="1.0.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Register in the order you want the request to encounter them:
# TrustedHost -> CORS.
# ---------------------------------------------------------------------------

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching a route
# handler; latency is measured around call_next.
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
#
# The rate limit dependency is listed here rather than on each router so it
# runs ahead of the routers' own auth dependencies.
# ---------------------------------------------------------------------------

_limited = [Depends(rate_limit)]

app.include_router(auth_router, tags=["Auth"], dependencies=_limited)
app.include_router(orders_router, prefix="/api/v1", tags=["Orders"], dependencies=_limited)
app.include_router(analyst_router, prefix="/api/v1", tags=["Analyst"], dependencies=_limited)
app.include_router(admin_router, prefix="/api/v1", tags=["Admin"], dependencies=_limited)


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can
# parse errors uniformly.
# ---------------------------------------------------------------------------


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body, path, or query fails validation."""
    return JSONResponse(
        status_code=400,
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

    Registered on the Starlette base class so router 404/405 responses get
    the same envelope as errors raised by route handlers.

    Route handlers raise HTTPException with detail={"code", "message"}. When
    detail is already a dict, use it directly as the error field.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Fallback for typed service errors a route did not translate itself.

    The status comes from the error's category (see core/errors.py).
    Infrastructure failures are logged with traceback and their message is
    replaced with a generic one.
    """
    if exc.status_code >= 500:
        logger.error("Service failure on %s %s", request.method, request.url.path, exc_info=exc)
        error = ErrorDetail(code=exc.code, message="An unexpected error occurred.")
    else:
        error = ErrorDetail(code=exc.code, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=error).model_dump())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
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
#
# Defined directly in main.py so it is reachable regardless of router
# registration. Not rate limited: load balancer probes must not consume or be
# refused by the shared budget.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return liveness and the service name."""
    return HealthResponse(service=_settings.service_name)
