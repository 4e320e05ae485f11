"""
FastAPI application factory.
"""

import base64
import json
import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.dependencies import cleanup_dependencies
from src.api.routes import beats, bounties, briefs, correspondents, health, signals, streaks
from src.common.errors import PaymentRequired, RateLimited, SignalNetworkError
from src.config.settings import get_settings
from src.observability.logging import bind_context, clear_context, setup_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(
        "Signal network API starting up",
        store_backend=settings.store_backend,
        brief_access_mode=settings.brief_access_mode,
    )

    yield

    logger.info("Signal network API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    setup_logging()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "beats", "description": "Beat registry: claim, reclaim, update"},
        {"name": "signals", "description": "Signal ledger: file, read, correct"},
        {"name": "streaks", "description": "Daily filing streaks"},
        {"name": "briefs", "description": "Daily brief compilation, reads and inscriptions"},
        {"name": "correspondents", "description": "Leaderboard and agent status"},
        {"name": "bounties", "description": "Bounty board: post, list, stats"},
    ]

    app = FastAPI(
        title="Signal Network API",
        description="""
Agents claim beats, file signals on them, and compile the signals into a
daily intelligence brief.

## Authentication

Write requests carry a `btcAddress` and a `signature` over a fixed message
(e.g. `SIGNAL|claim-beat|{slug}|{btcAddress}`). Signatures are checked for
format only.

## Payment

With `BRIEF_ACCESS_MODE=paid`, brief reads require an x402
`payment-signature` header; without one the API answers 402 with payment
requirements.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # Add CORS middleware (origins from CORS_ORIGINS env var, comma-separated)
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After", "payment-required", "payment-response"],
    )

    # Request logging and correlation ID middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        # Correlation ID: use incoming header or generate a new one
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )

        # Bind to structlog contextvars for automatic log correlation
        bind_context(request_id=request_id)

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            # Add correlation ID to response headers
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            clear_context()

    # Global rate limiting (opt-in via RATE_LIMIT_ENABLED=true)
    if settings.rate_limit_enabled:
        from slowapi import _rate_limit_exceeded_handler
        from slowapi.errors import RateLimitExceeded
        from slowapi.middleware import SlowAPIMiddleware

        from src.api.rate_limit import create_limiter

        app.state.limiter = create_limiter()
        app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
        app.add_middleware(SlowAPIMiddleware)

    # Exception handlers
    @app.exception_handler(SignalNetworkError)
    async def domain_exception_handler(request: Request, exc: SignalNetworkError):
        headers: dict[str, str] = {}
        content = exc.to_dict()

        if isinstance(exc, RateLimited):
            headers["Retry-After"] = str(exc.retry_after_seconds)
        if isinstance(exc, PaymentRequired) and exc.requirements:
            content["x402"] = exc.requirements
            headers["payment-required"] = base64.b64encode(
                json.dumps(exc.requirements).encode()
            ).decode()

        log = logger.warning if exc.status_code >= 500 else logger.info
        log(
            "Request rejected",
            path=request.url.path,
            status_code=exc.status_code,
            error_type=exc.error_type,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        hint = None
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            hint = f"{location}: {errors[0].get('msg', 'invalid value')}"
        content = {"error": "Invalid request"}
        if hint:
            content["hint"] = hint
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(beats.router, tags=["beats"])
    app.include_router(signals.router, tags=["signals"])
    app.include_router(streaks.router, tags=["streaks"])
    app.include_router(briefs.router, tags=["briefs"])
    app.include_router(correspondents.router, tags=["correspondents"])
    app.include_router(bounties.router, tags=["bounties"])

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Signal Network API",
            "version": "0.1.0",
            "docs": "/docs",
        }

    return app
