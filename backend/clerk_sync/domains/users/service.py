"""Apply Clerk user lifecycle events to the user store."""

from __future__ import annotations

import logging
from typing import Literal

from clerk_sync.exceptions import UserAlreadyExistsError, UserNotFoundError
from clerk_sync.logging_config import set_request_context
from clerk_sync.ports import UserFields, UserRecord, UserStorePort
from clerk_sync.schemas.clerk import (
    ClerkUserData,
    UnhandledEvent,
    UserCreatedEvent,
    UserUpdatedEvent,
    WebhookEvent,
)

logger = logging.getLogger("users")

SyncOutcome = Literal["created", "updated", "deleted", "noop", "ignored"]


def record_from_clerk(data: ClerkUserData) -> UserRecord:
    return UserRecord(
        id=data.id,
        email=data.primary_email,
        name=data.display_name,
        profile_image=data.image_url,
    )


class UserSyncService:
    """Mirror one webhook event into the store.

    With ``absorb_conflicts`` (the default) a duplicate ``user.created`` is
    applied as an update and a ``user.updated`` for an unknown id is applied
    as a create, since Clerk delivers at least once and without ordering.
    Without it, those conflicts propagate to the caller.
    ``user.deleted`` for an unknown id is always a no-op.
    """

    def __init__(self, store: UserStorePort, absorb_conflicts: bool = True) -> None:
        self.store = store
        self.absorb_conflicts = absorb_conflicts

    async def apply(self, event: WebhookEvent) -> SyncOutcome:
        if isinstance(event, UnhandledEvent):
            return self._on_unhandled(event)

        set_request_context(user_id=event.data.id)
        if isinstance(event, UserCreatedEvent):
            outcome = await self._on_created(record_from_clerk(event.data))
        elif isinstance(event, UserUpdatedEvent):
            outcome = await self._on_updated(record_from_clerk(event.data))
        else:
            outcome = await self._on_deleted(event.data.id)

        logger.info(
            "User event applied",
            extra={
                "service": "users",
                "event_type": event.type,
                "outcome": outcome,
            },
        )
        return outcome

    async def _on_created(self, record: UserRecord) -> SyncOutcome:
        try:
            await self.store.create(record)
            return "created"
        except UserAlreadyExistsError:
            if not self.absorb_conflicts:
                raise
            logger.info(
                "Duplicate user.created, overwriting existing row",
                extra={"service": "users", "user_id": record.id},
            )
        await self.store.update(record.id, record.fields)
        return "updated"

    async def _on_updated(self, record: UserRecord) -> SyncOutcome:
        try:
            await self.store.update(record.id, record.fields)
            return "updated"
        except UserNotFoundError:
            if not self.absorb_conflicts:
                raise
            logger.info(
                "user.updated for unknown user, creating it",
                extra={"service": "users", "user_id": record.id},
            )
        await self.store.create(record)
        return "created"

    async def _on_deleted(self, user_id: str) -> SyncOutcome:
        try:
            await self.store.delete(user_id)
        except UserNotFoundError:
            return "noop"
        return "deleted"

    def _on_unhandled(self, event: UnhandledEvent) -> SyncOutcome:
        logger.debug(
            "Unhandled webhook event type, acknowledging",
            extra={"service": "users", "event_type": event.type},
        )
        return "ignored"
