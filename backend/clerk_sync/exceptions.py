"""Custom exceptions for the application.

This module defines application-specific exceptions with structured
error codes and metadata for consistent error handling at the request
boundary.

Exception Hierarchy:
- AppError (base)
  ├── ConfigurationError
  │   └── SigningSecretMissingError
  ├── ValidationError
  │   ├── MissingWebhookHeadersError
  │   └── MalformedWebhookPayloadError
  ├── WebhookVerificationError
  │   └── WebhookTimestampError
  ├── NotFoundError
  │   └── UserNotFoundError
  ├── ConflictError
  │   └── UserAlreadyExistsError
  └── UserStoreUnavailableError

Usage:
    try:
        await store.delete(user_id)
    except UserNotFoundError:
        # Already gone, nothing to do
        pass

Attributes:
    code: Machine-readable error code (e.g., "USER_NOT_FOUND")
    message: Human-readable error message
    details: Additional context for debugging
    retryable: Whether the operation can be retried
    status_code: HTTP status used when the error reaches the request boundary
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


class AppError(Exception):
    """Base exception for application errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable error message
        details: Additional context for debugging
        retryable: Whether the operation can be retried
        status_code: HTTP status for the request boundary
        timestamp: When the error occurred
    """

    code: str = "APP_ERROR"
    message: str = "An unexpected error occurred"
    retryable: bool = False
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
    ) -> None:
        """Initialize error with optional message and details."""
        self.message = message or self.message
        self.details = details or {}
        if retryable is not None:
            self.retryable = retryable
        self.timestamp = datetime.now(UTC)
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "retryable": self.retryable,
                "timestamp": self.timestamp.isoformat(),
            }
        }

    def __str__(self) -> str:
        """String representation with code."""
        return f"[{self.code}] {self.message}"


class ConfigurationError(AppError):
    """Base exception for configuration errors."""

    code = "CONFIGURATION_ERROR"
    message = "Invalid configuration"
    status_code = 503


class SigningSecretMissingError(ConfigurationError):
    """Raised when the webhook signing secret is not configured.

    The webhook route must not accept traffic without it.
    """

    code = "SIGNING_SECRET_MISSING"
    message = (
        "Error: Please add CLERK_WEBHOOK_SIGNING_SECRET from the Clerk Dashboard "
        "to the environment or .env"
    )


class ValidationError(AppError):
    """Base exception for validation errors."""

    code = "VALIDATION_ERROR"
    message = "Validation failed"
    status_code = 400


class MissingWebhookHeadersError(ValidationError):
    """Raised when one or more of the svix headers are absent."""

    code = "MISSING_WEBHOOK_HEADERS"
    message = "Error: Missing Svix headers"

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(details={"missing": missing})


class MalformedWebhookPayloadError(ValidationError):
    """Raised when the webhook body is not a well-formed event envelope."""

    code = "MALFORMED_WEBHOOK_PAYLOAD"
    message = "Error: Malformed webhook payload"

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        self.reason = reason
        full_details = {"reason": reason}
        if details:
            full_details.update(details)
        super().__init__(details=full_details)


class WebhookVerificationError(AppError):
    """Raised when the webhook signature does not match."""

    code = "WEBHOOK_VERIFICATION_FAILED"
    message = "Error: Verification error"
    status_code = 400

    def __init__(self, reason: str = "No matching signature found") -> None:
        self.reason = reason
        super().__init__(details={"reason": reason})


class WebhookTimestampError(WebhookVerificationError):
    """Raised when svix-timestamp is unparsable or outside the tolerance window."""

    code = "WEBHOOK_TIMESTAMP_INVALID"


class NotFoundError(AppError):
    """Base exception for resource not found errors."""

    code = "NOT_FOUND"
    message = "Resource not found"

    def __init__(
        self,
        resource: str,
        identifier: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize not found error."""
        self.resource = resource
        self.identifier = identifier
        full_details = {"resource": resource, "identifier": str(identifier)}
        if details:
            full_details.update(details)
        super().__init__(
            message=f"{resource} not found: {identifier}",
            details=full_details,
        )


class UserNotFoundError(NotFoundError):
    """Raised when no user row matches the given id."""

    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(resource="User", identifier=user_id)


class ConflictError(AppError):
    """Base exception for uniqueness conflicts."""

    code = "CONFLICT"
    message = "Resource already exists"


class UserAlreadyExistsError(ConflictError):
    """Raised when creating a user whose id is already stored."""

    code = "USER_ALREADY_EXISTS"

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(
            message=f"User already exists: {user_id}",
            details={"resource": "User", "identifier": user_id},
        )


class UserStoreUnavailableError(AppError):
    """Raised when the user store cannot complete an operation.

    The provider is expected to retry the delivery later.
    """

    code = "USER_STORE_UNAVAILABLE"
    message = "Error: User store unavailable"
    retryable = True

    def __init__(self, operation: str, error: str | None = None) -> None:
        self.operation = operation
        super().__init__(details={"operation": operation, "error": error})


__all__ = [
    "AppError",
    "ConfigurationError",
    "SigningSecretMissingError",
    "ValidationError",
    "MissingWebhookHeadersError",
    "MalformedWebhookPayloadError",
    "WebhookVerificationError",
    "WebhookTimestampError",
    "NotFoundError",
    "UserNotFoundError",
    "ConflictError",
    "UserAlreadyExistsError",
    "UserStoreUnavailableError",
]
