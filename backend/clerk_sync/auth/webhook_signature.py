"""Svix webhook signature verification for Clerk deliveries.

Clerk signs every webhook through Svix:

- ``svix-id``: unique message id (stable across retries)
- ``svix-timestamp``: unix seconds when the message was signed
- ``svix-signature``: space-separated ``v1,<base64 HMAC-SHA256>`` entries

The signed content is ``{svix-id}.{svix-timestamp}.{raw body}`` keyed with the
base64-decoded part of the ``whsec_...`` secret. Several signatures may be sent
at once while a secret is being rotated; any ``v1`` match is accepted.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass

from clerk_sync.exceptions import (
    ConfigurationError,
    MissingWebhookHeadersError,
    SigningSecretMissingError,
    WebhookTimestampError,
    WebhookVerificationError,
)

logger = logging.getLogger("auth")

SECRET_PREFIX = "whsec_"
SIGNATURE_VERSION = "v1"
DEFAULT_TOLERANCE_SECONDS = 300

HEADER_ID = "svix-id"
HEADER_TIMESTAMP = "svix-timestamp"
HEADER_SIGNATURE = "svix-signature"

# Standard Webhooks spelling sent by newer Svix deliveries
_HEADER_ALIASES = {
    HEADER_ID: "webhook-id",
    HEADER_TIMESTAMP: "webhook-timestamp",
    HEADER_SIGNATURE: "webhook-signature",
}


@dataclass(frozen=True)
class WebhookHeaders:
    """The three headers every signed delivery must carry."""

    msg_id: str
    timestamp: str
    signature: str


def extract_webhook_headers(headers: Mapping[str, str]) -> WebhookHeaders:
    """Pull the svix headers out of a request header mapping.

    Raises:
        MissingWebhookHeadersError: if any of the three headers is absent or empty.
    """
    lowered = {k.lower(): v for k, v in headers.items()}

    values: dict[str, str] = {}
    missing: list[str] = []
    for name in (HEADER_ID, HEADER_TIMESTAMP, HEADER_SIGNATURE):
        value = lowered.get(name) or lowered.get(_HEADER_ALIASES[name])
        if not value:
            missing.append(name)
        else:
            values[name] = value

    if missing:
        raise MissingWebhookHeadersError(missing)

    return WebhookHeaders(
        msg_id=values[HEADER_ID],
        timestamp=values[HEADER_TIMESTAMP],
        signature=values[HEADER_SIGNATURE],
    )


def _decode_secret(secret: str) -> bytes:
    raw = (secret or "").strip()
    if not raw:
        raise SigningSecretMissingError()
    if raw.startswith(SECRET_PREFIX):
        raw = raw[len(SECRET_PREFIX):]
    try:
        key = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError(
            "Webhook signing secret is not valid base64",
            details={"setting": "clerk_webhook_signing_secret"},
        ) from exc
    if not key:
        raise SigningSecretMissingError()
    return key


class WebhookSignatureVerifier:
    """Verify Svix-signed webhook deliveries against one shared secret.

    Built once at startup from configuration; holds no mutable state, so a
    single instance is shared by all requests.
    """

    def __init__(self, secret: str, tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS) -> None:
        self._key = _decode_secret(secret)
        self.tolerance_seconds = tolerance_seconds

    def sign(self, msg_id: str, timestamp: int | str, body: bytes) -> str:
        """Return the ``v1,<signature>`` header value for a message."""
        digest = hmac.new(
            self._key,
            self._signed_content(msg_id, str(timestamp), body),
            hashlib.sha256,
        ).digest()
        return f"{SIGNATURE_VERSION},{base64.b64encode(digest).decode('utf-8')}"

    def verify(
        self,
        body: bytes,
        headers: Mapping[str, str] | WebhookHeaders,
        now: float | None = None,
    ) -> WebhookHeaders:
        """Check the signature of a raw request body.

        Args:
            body: Raw request body bytes, exactly as received
            headers: Request headers, or already extracted ``WebhookHeaders``
            now: Current unix time (defaults to ``time.time()``)

        Returns:
            The extracted webhook headers

        Raises:
            MissingWebhookHeadersError: a required header is absent
            WebhookTimestampError: timestamp unparsable or outside the tolerance window
            WebhookVerificationError: no ``v1`` signature matches
        """
        if not isinstance(headers, WebhookHeaders):
            headers = extract_webhook_headers(headers)

        timestamp = self._check_timestamp(headers.timestamp, now)

        expected = self.sign(headers.msg_id, timestamp, body).split(",", 1)[1]

        for candidate in headers.signature.split():
            version, _, signature = candidate.partition(",")
            if version != SIGNATURE_VERSION or not signature:
                continue
            if hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
                return headers

        logger.warning(
            "Webhook signature mismatch",
            extra={"service": "auth", "webhook_id": headers.msg_id},
        )
        raise WebhookVerificationError()

    def _check_timestamp(self, raw: str, now: float | None) -> int:
        try:
            timestamp = int(raw)
        except (TypeError, ValueError) as exc:
            raise WebhookTimestampError("Invalid signature timestamp") from exc

        current = time.time() if now is None else now
        if timestamp < current - self.tolerance_seconds:
            logger.warning(
                "Webhook timestamp too old",
                extra={"service": "auth", "metadata": {"timestamp": timestamp}},
            )
            raise WebhookTimestampError("Message timestamp too old")
        if timestamp > current + self.tolerance_seconds:
            logger.warning(
                "Webhook timestamp too new",
                extra={"service": "auth", "metadata": {"timestamp": timestamp}},
            )
            raise WebhookTimestampError("Message timestamp too new")
        return timestamp

    @staticmethod
    def _signed_content(msg_id: str, timestamp: str, body: bytes) -> bytes:
        return f"{msg_id}.{timestamp}.".encode("utf-8") + body
