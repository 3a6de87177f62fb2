"""Clerk User Sync - FastAPI Application."""

import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response

from clerk_sync.api.http.webhooks import router as webhooks_router
from clerk_sync.auth import WebhookSignatureVerifier
from clerk_sync.config import get_settings
from clerk_sync.database import close_db, init_db
from clerk_sync.exceptions import AppError
from clerk_sync.infrastructure.metrics import render_prometheus
from clerk_sync.logging_config import (
    clear_request_context,
    set_request_context,
    setup_logging,
)

# Initialize settings
settings = get_settings()

# Setup logging
setup_logging(
    log_level=settings.log_level,
    debug_namespaces=settings.debug_namespaces,
)

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    logger.info("Starting Clerk User Sync", extra={"service": "app"})
    current = get_settings()
    current.log_config_summary()

    # Refuses to start without a usable signing secret
    try:
        app.state.webhook_verifier = WebhookSignatureVerifier(
            current.clerk_webhook_signing_secret,
            tolerance_seconds=current.clerk_webhook_tolerance_seconds,
        )
    except AppError as exc:
        logger.error(
            "Webhook signing secret is not usable",
            extra={"service": "app", "error_code": exc.code},
        )
        raise
    app.state.webhook_absorb_conflicts = current.clerk_webhook_absorb_conflicts

    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Clerk User Sync", extra={"service": "app"})
    app.state.webhook_verifier = None
    await close_db()


app = FastAPI(
    title="Clerk User Sync",
    description="Mirrors Clerk user lifecycle webhooks into the users table",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(webhooks_router)


@app.exception_handler(AppError)
async def _app_error_handler(_request: Request, exc: AppError) -> PlainTextResponse:
    # The provider only reads the status code; keep bodies short
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.middleware("http")
async def _http_request_context(request: Request, call_next):
    request_id = request.headers.get("x-request-id")
    if not request_id:
        request_id = str(uuid4())

    set_request_context(request_id=request_id)
    start = time.time()
    status_code: int | None = None
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        duration_ms = int((time.time() - start) * 1000)
        logger.info(
            "HTTP request completed",
            extra={
                "service": "http",
                "duration_ms": duration_ms,
                "metadata": {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                },
            },
        )
        clear_request_context()


# =============================================================================
# Health Check Endpoints
# =============================================================================


@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "clerk-user-sync"}


@app.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness check for deployments (checks DB and webhook verifier)."""
    from sqlalchemy import text

    from clerk_sync.database import get_session_context

    errors = []

    if getattr(request.app.state, "webhook_verifier", None) is None:
        errors.append("Webhook: signing secret not configured")

    try:
        async with get_session_context() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        errors.append(f"Database: {e}")

    if errors:
        return {
            "status": "unhealthy",
            "errors": errors,
        }

    return {"status": "ready"}


@app.get("/metrics")
async def metrics() -> Response:
    if not get_settings().prometheus_metrics_enabled:
        raise HTTPException(status_code=404, detail="metrics disabled")

    return Response(
        content=render_prometheus(),
        media_type="text/plain; version=0.0.4",
    )
