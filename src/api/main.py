"""NetDash API — affiliate network dashboard backend."""
from __future__ import annotations

import logging

from src.logging_config import setup_logging
setup_logging()
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.requests import Request as FastAPIRequest

from config.settings import settings
from src.models.envelope import fail, utc_timestamp
from src.services.request_builder import MissingDateRangeError
from src.upstream.client import UpstreamClient, UpstreamCredential
from src.upstream.errors import UpstreamError

# ── Sentry Error Tracking ────────────────────────
if settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR),
        ],
        # Scrub sensitive data (the upstream API key travels in a header)
        send_default_pii=False,
        before_send=lambda event, hint: (
            {**event, "request": {**event.get("request", {}), "cookies": None, "headers": None}}
            if "request" in event else event
        ),
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate config, build the upstream credential and client once, close on shutdown."""
    from src.startup_checks import validate_settings
    validate_settings()

    credential = UpstreamCredential.from_settings(settings)
    app.state.upstream_client = UpstreamClient(credential, timeout=settings.UPSTREAM_TIMEOUT_SECONDS)
    logger.info(
        "Upstream client ready (network=%s, affiliate=%s, key=%s)",
        credential.base_url, credential.affiliate_base_url, credential.key_prefix,
    )

    yield

    logger.info("Shutting down — closing upstream connections...")
    await app.state.upstream_client.close()
    logger.info("Shutdown complete")


app = FastAPI(
    title="NetDash API",
    version="0.1.0",
    description="Normalized offers, partners, conversions and profit reporting from an affiliate network",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics
from src.middleware.metrics import MetricsMiddleware
app.add_middleware(MetricsMiddleware)

# Request ID tracing (outermost, so every log line below it is tagged)
from src.middleware.request_id import RequestIDMiddleware
app.add_middleware(RequestIDMiddleware)


# ---- Routers ----
from src.api.resources import router as resources_router
app.include_router(resources_router)

from src.api.reporting import router as reporting_router
app.include_router(reporting_router)


@app.get("/")
async def root():
    return {"name": "NetDash API", "version": app.version, "docs": "/docs"}


@app.get("/health")
async def health():
    """Liveness probe. Reports whether live upstream data is possible."""
    client = getattr(app.state, "upstream_client", None)
    return {
        "status": "ok",
        "upstream_configured": bool(client and client.has_credentials),
        "timestamp": utc_timestamp(),
    }


# ---- Error handlers ----


@app.exception_handler(MissingDateRangeError)
async def missing_date_range_handler(request: FastAPIRequest, exc: MissingDateRangeError):
    return JSONResponse(status_code=400, content=fail(str(exc)))


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: FastAPIRequest, exc: UpstreamError):
    """Upstream failures on endpoints that have no mock fallback (e.g. export)."""
    logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=fail(str(exc)))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: FastAPIRequest, exc: RequestValidationError):
    """Return clean, structured validation errors instead of raw Pydantic output."""
    errors = []
    for err in exc.errors():
        field = " → ".join(str(loc) for loc in err["loc"]) if err.get("loc") else "unknown"
        errors.append({"field": field, "message": err["msg"]})
    return JSONResponse(status_code=422, content={
        "success": False,
        "error": "validation_error",
        "message": "Invalid request data",
        "details": errors,
        "timestamp": utc_timestamp(),
    })


@app.exception_handler(HTTPException)
async def http_error_handler(request: FastAPIRequest, exc: HTTPException):
    """Consistent error envelope for all HTTP errors."""
    return JSONResponse(status_code=exc.status_code, headers=exc.headers, content={
        "success": False,
        "error": exc.detail if isinstance(exc.detail, str) else "error",
        "message": exc.detail,
        "timestamp": utc_timestamp(),
    })


@app.exception_handler(Exception)
async def unhandled_error_handler(request: FastAPIRequest, exc: Exception):
    """Catch-all for unhandled exceptions — never leak stack traces."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={
        "success": False,
        "error": "internal_error",
        "message": "Something went wrong. Please try again.",
        "timestamp": utc_timestamp(),
    })
