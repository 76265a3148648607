"""
FastAPI application entry point.
Sets up the API with lifespan events, error envelopes and metrics.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from scribe.config import settings
from scribe.database import init_db
from scribe.api.dependencies import get_usage_meter
from scribe.api.router import api_router
from scribe.exceptions import ScribeError, RateLimitExceeded
from scribe.middleware.metrics_middleware import MetricsMiddleware
from scribe.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Configure logging and create tables
    - Shutdown: Flush pending usage records
    """
    configure_logging('scribe-api', settings.log_level)

    await init_db()

    yield

    await get_usage_meter().drain()


app = FastAPI(
    title="SummaryScribe API",
    description="Tiered AI summarization with usage metering",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware (must be after CORS to track all requests)
app.add_middleware(MetricsMiddleware)

app.include_router(api_router, prefix="/api")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message, "retryAfterSeconds": exc.retry_after_seconds},
        headers={
            "Retry-After": str(exc.retry_after_seconds),
            "X-RateLimit-Limit": str(exc.limit),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(exc.retry_after_seconds),
        },
    )


@app.exception_handler(ScribeError)
async def scribe_error_handler(request: Request, exc: ScribeError):
    if exc.status_code >= 500:
        # Internal cause stays in the logs
        logger.error(
            f"{request.method} {request.url.path} failed: {exc}",
            extra={"event": "request_failed", "path": request.url.path, "error_type": type(exc).__name__},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        if location:
            message = f"Invalid value for {location}"
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "SummaryScribe API",
        "version": "0.1.0",
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
