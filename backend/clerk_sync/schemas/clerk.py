"""Clerk webhook event envelopes, parsed into one typed variant per event."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from clerk_sync.exceptions import MalformedWebhookPayloadError

USER_CREATED = "user.created"
USER_UPDATED = "user.updated"
USER_DELETED = "user.deleted"


def derive_display_name(first_name: str | None, last_name: str | None, email: str) -> str:
    """Join first and last name, falling back to the email when both are blank."""
    full_name = f"{first_name or ''} {last_name or ''}".strip()
    return full_name or email


class ClerkEmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    email_address: str

    @field_validator("email_address")
    @classmethod
    def _validate_email_address(cls, v: str) -> str:
        value = (v or "").strip()
        if not value:
            raise ValueError("email_address must be non-empty")
        return value


class ClerkUserData(BaseModel):
    """The ``data`` object of user.created / user.updated events."""

    model_config = ConfigDict(extra="ignore")

    id: str
    first_name: str | None = None
    last_name: str | None = None
    email_addresses: list[ClerkEmailAddress] = Field(min_length=1)
    primary_email_address_id: str | None = None
    image_url: str | None = None

    @field_validator("id")
    @classmethod
    def _validate_id(cls, v: str) -> str:
        # Opaque provider id, kept exactly as sent
        if not (v or "").strip():
            raise ValueError("User id must be non-empty")
        return v

    @property
    def primary_email(self) -> str:
        if self.primary_email_address_id:
            for entry in self.email_addresses:
                if entry.id == self.primary_email_address_id:
                    return entry.email_address
        return self.email_addresses[0].email_address

    @property
    def display_name(self) -> str:
        return derive_display_name(self.first_name, self.last_name, self.primary_email)


class ClerkDeletedObject(BaseModel):
    """The ``data`` object of user.deleted events."""

    model_config = ConfigDict(extra="ignore")

    id: str
    deleted: bool | None = None
    object: str | None = None

    @field_validator("id")
    @classmethod
    def _validate_id(cls, v: str) -> str:
        # Opaque provider id, kept exactly as sent
        if not (v or "").strip():
            raise ValueError("User id must be non-empty")
        return v


class UserCreatedEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["user.created"]
    data: ClerkUserData


class UserUpdatedEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["user.updated"]
    data: ClerkUserData


class UserDeletedEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Literal["user.deleted"]
    data: ClerkDeletedObject


class UnhandledEvent(BaseModel):
    """Any event type this service does not mirror (org.created, session.*, ...)."""

    model_config = ConfigDict(extra="ignore")

    type: str
    data: dict[str, Any] = Field(default_factory=dict)


WebhookEvent = UserCreatedEvent | UserUpdatedEvent | UserDeletedEvent | UnhandledEvent

_EVENT_MODELS: dict[str, type[BaseModel]] = {
    USER_CREATED: UserCreatedEvent,
    USER_UPDATED: UserUpdatedEvent,
    USER_DELETED: UserDeletedEvent,
}


def parse_event(envelope: Any) -> WebhookEvent:
    """Validate a decoded webhook body into its typed event variant.

    Raises:
        MalformedWebhookPayloadError: the envelope is not an object, has no
            string ``type``, or a known event's ``data`` does not match its schema.
    """
    if not isinstance(envelope, dict):
        raise MalformedWebhookPayloadError("Event envelope must be a JSON object")

    event_type = envelope.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise MalformedWebhookPayloadError("Event envelope is missing a string 'type'")

    model = _EVENT_MODELS.get(event_type)
    if model is None:
        data = envelope.get("data")
        return UnhandledEvent(type=event_type, data=data if isinstance(data, dict) else {})

    try:
        return model.model_validate(envelope)
    except ValidationError as exc:
        raise MalformedWebhookPayloadError(
            f"Invalid {event_type} payload",
            details={
                "event_type": event_type,
                "errors": exc.errors(
                    include_url=False, include_context=False, include_input=False
                ),
            },
        ) from exc


__all__ = [
    "USER_CREATED",
    "USER_UPDATED",
    "USER_DELETED",
    "ClerkEmailAddress",
    "ClerkUserData",
    "ClerkDeletedObject",
    "UserCreatedEvent",
    "UserUpdatedEvent",
    "UserDeletedEvent",
    "UnhandledEvent",
    "WebhookEvent",
    "derive_display_name",
    "parse_event",
]
