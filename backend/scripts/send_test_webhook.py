"""Send a signed Clerk user event to a running service.

Signs the payload with CLERK_WEBHOOK_SIGNING_SECRET exactly as Svix does,
so the endpoint can be exercised locally without a Clerk tunnel.

Usage (from backend directory):

    python scripts/send_test_webhook.py user.created --user-id user_123
    python scripts/send_test_webhook.py user.updated --user-id user_123 --first-name Ada
    python scripts/send_test_webhook.py user.deleted --user-id user_123

Environment:
- Uses CLERK_WEBHOOK_SIGNING_SECRET via clerk_sync.config (same as the API)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import time
from typing import Any
from uuid import uuid4

import httpx

from clerk_sync.auth import WebhookSignatureVerifier
from clerk_sync.config import get_settings
from clerk_sync.logging_config import setup_logging
from clerk_sync.schemas.clerk import USER_CREATED, USER_DELETED, USER_UPDATED

logger = logging.getLogger("scripts.send_test_webhook")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a signed Clerk user webhook.")
    parser.add_argument(
        "event_type",
        choices=[USER_CREATED, USER_UPDATED, USER_DELETED],
        help="Clerk event type to send",
    )
    parser.add_argument("--user-id", default="user_dev_123", help="Clerk user id")
    parser.add_argument("--email", default="dev@example.com")
    parser.add_argument("--first-name", default="Dev")
    parser.add_argument("--last-name", default="User")
    parser.add_argument("--image-url", default=None)
    parser.add_argument(
        "--url",
        default="http://localhost:8000/api/webhooks/clerk/user",
        help="Webhook endpoint (default: local dev server)",
    )
    return parser.parse_args()


def _build_event(args: argparse.Namespace) -> dict[str, Any]:
    if args.event_type == USER_DELETED:
        data: dict[str, Any] = {"id": args.user_id, "object": "user", "deleted": True}
    else:
        data = {
            "id": args.user_id,
            "object": "user",
            "first_name": args.first_name,
            "last_name": args.last_name,
            "email_addresses": [{"id": "idn_dev", "email_address": args.email}],
            "primary_email_address_id": "idn_dev",
            "image_url": args.image_url,
        }
    return {"object": "event", "type": args.event_type, "data": data}


async def send_test_webhook(args: argparse.Namespace) -> int:
    settings = get_settings()
    verifier = WebhookSignatureVerifier(settings.clerk_webhook_signing_secret)

    body = json.dumps(_build_event(args)).encode("utf-8")
    msg_id = f"msg_{uuid4().hex}"
    timestamp = int(time.time())
    headers = {
        "svix-id": msg_id,
        "svix-timestamp": str(timestamp),
        "svix-signature": verifier.sign(msg_id, timestamp, body),
        "content-type": "application/json",
    }

    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(args.url, content=body, headers=headers)

    logger.info(
        "Test webhook sent",
        extra={
            "service": "scripts",
            "event_type": args.event_type,
            "status": response.status_code,
            "metadata": {"msg_id": msg_id, "body": response.text},
        },
    )
    print(f"{args.event_type} -> {response.status_code} {response.text}")
    return response.status_code


def main() -> None:
    """Entry point for CLI usage."""

    setup_logging(log_level="INFO")
    status = asyncio.run(send_test_webhook(_parse_args()))
    raise SystemExit(0 if status == 200 else 1)


if __name__ == "__main__":
    main()
