from __future__ import annotations

import base64
import json
import time
from typing import Any
from uuid import uuid4

from clerk_sync.auth import WebhookSignatureVerifier
from clerk_sync.exceptions import UserAlreadyExistsError, UserNotFoundError
from clerk_sync.ports import UserFields, UserRecord, UserStorePort

TEST_SIGNING_SECRET = "whsec_" + base64.b64encode(b"clerk-sync-test-signing-key-0001").decode()

WEBHOOK_PATH = "/api/webhooks/clerk/user"


class WebhookSigner:
    """Builds signed (body, headers) pairs the way Svix delivers them."""

    def __init__(self, secret: str = TEST_SIGNING_SECRET) -> None:
        self._verifier = WebhookSignatureVerifier(secret)

    def sign(
        self,
        payload: dict[str, Any] | bytes,
        *,
        msg_id: str | None = None,
        timestamp: int | None = None,
    ) -> tuple[bytes, dict[str, str]]:
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        msg_id = msg_id or f"msg_{uuid4().hex}"
        timestamp = int(time.time()) if timestamp is None else timestamp
        headers = {
            "svix-id": msg_id,
            "svix-timestamp": str(timestamp),
            "svix-signature": self._verifier.sign(msg_id, timestamp, body),
            "content-type": "application/json",
        }
        return body, headers


def user_event(
    event_type: str,
    user_id: str = "u1",
    *,
    first_name: str | None = "Jane",
    last_name: str | None = "Doe",
    email: str = "jane@doe.com",
    image_url: str | None = "http://img/1.png",
) -> dict[str, Any]:
    return {
        "object": "event",
        "type": event_type,
        "data": {
            "id": user_id,
            "object": "user",
            "first_name": first_name,
            "last_name": last_name,
            "email_addresses": [{"id": "idn_1", "email_address": email}],
            "primary_email_address_id": "idn_1",
            "image_url": image_url,
        },
    }


def deleted_event(user_id: str = "u1") -> dict[str, Any]:
    return {
        "object": "event",
        "type": "user.deleted",
        "data": {"id": user_id, "object": "user", "deleted": True},
    }


class SpyUserStore(UserStorePort):
    """In-memory store that records every call made to it."""

    def __init__(self) -> None:
        self.rows: dict[str, UserRecord] = {}
        self.calls: list[tuple[str, str]] = []

    async def get(self, user_id: str) -> UserRecord | None:
        self.calls.append(("get", user_id))
        return self.rows.get(user_id)

    async def create(self, record: UserRecord) -> UserRecord:
        self.calls.append(("create", record.id))
        if record.id in self.rows:
            raise UserAlreadyExistsError(record.id)
        self.rows[record.id] = record
        return record

    async def update(self, user_id: str, fields: UserFields) -> UserRecord:
        self.calls.append(("update", user_id))
        if user_id not in self.rows:
            raise UserNotFoundError(user_id)
        record = UserRecord(
            id=user_id,
            email=fields.email,
            name=fields.name,
            profile_image=fields.profile_image,
        )
        self.rows[user_id] = record
        return record

    async def delete(self, user_id: str) -> None:
        self.calls.append(("delete", user_id))
        if user_id not in self.rows:
            raise UserNotFoundError(user_id)
        del self.rows[user_id]
