"""Authentication module - Clerk webhook signatures (Svix)."""

from clerk_sync.auth.webhook_signature import (
    WebhookHeaders,
    WebhookSignatureVerifier,
    extract_webhook_headers,
)

__all__ = [
    "WebhookHeaders",
    "WebhookSignatureVerifier",
    "extract_webhook_headers",
]
