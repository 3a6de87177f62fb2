"""Pydantic schemas for webhook payload validation."""

from clerk_sync.schemas.clerk import (  # noqa: F401
    ClerkDeletedObject,
    ClerkEmailAddress,
    ClerkUserData,
    UnhandledEvent,
    UserCreatedEvent,
    UserDeletedEvent,
    UserUpdatedEvent,
    WebhookEvent,
    derive_display_name,
    parse_event,
)

__all__ = [
    # Clerk payloads
    "ClerkEmailAddress",
    "ClerkUserData",
    "ClerkDeletedObject",
    # Event variants
    "UserCreatedEvent",
    "UserUpdatedEvent",
    "UserDeletedEvent",
    "UnhandledEvent",
    "WebhookEvent",
    "derive_display_name",
    "parse_event",
]
