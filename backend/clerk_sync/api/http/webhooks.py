"""HTTP endpoint receiving Clerk user lifecycle webhooks."""

from __future__ import annotations

import json
import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from clerk_sync.api.http.dependencies import get_user_sync_service, get_webhook_verifier
from clerk_sync.auth import WebhookSignatureVerifier, extract_webhook_headers
from clerk_sync.domains.users.service import UserSyncService
from clerk_sync.exceptions import AppError, MalformedWebhookPayloadError
from clerk_sync.infrastructure.metrics import record_webhook
from clerk_sync.logging_config import set_request_context
from clerk_sync.schemas.clerk import parse_event

router = APIRouter(prefix="/api/webhooks/clerk", tags=["webhooks"])
logger = logging.getLogger("webhooks")


@router.post("/user", response_class=PlainTextResponse)
async def receive_user_webhook(
    request: Request,
    verifier: WebhookSignatureVerifier = Depends(get_webhook_verifier),
    sync_service: UserSyncService = Depends(get_user_sync_service),
) -> PlainTextResponse:
    """Verify a Clerk delivery and mirror it into the users table.

    Returns 200 for every verified event, including types that are not
    mirrored. Rejections (400) and store failures (500) are raised as
    ``AppError`` and rendered by the application exception handler.
    """
    started = time.time()
    event_type = "unknown"

    try:
        headers = extract_webhook_headers(request.headers)
        set_request_context(webhook_id=headers.msg_id)

        # Signature covers the exact bytes received
        body = await request.body()
        verifier.verify(body, headers)

        try:
            envelope = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedWebhookPayloadError("Body is not valid JSON") from exc

        event = parse_event(envelope)
        event_type = event.type

        outcome = await sync_service.apply(event)
    except AppError as exc:
        record_webhook(event_type, exc.code.lower())
        logger.warning(
            "Webhook rejected",
            extra={
                "service": "webhooks",
                "event_type": event_type,
                "status": exc.status_code,
                "error_code": exc.code,
                "metadata": exc.to_dict()["error"],
            },
        )
        raise

    record_webhook(event_type, outcome)
    logger.info(
        "Webhook processed",
        extra={
            "service": "webhooks",
            "event_type": event_type,
            "outcome": outcome,
            "duration_ms": int((time.time() - started) * 1000),
        },
    )
    return PlainTextResponse("Webhook received", status_code=200)
