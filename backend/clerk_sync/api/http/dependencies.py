"""Common HTTP dependencies (webhook verifier, user store, sync service)."""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clerk_sync.auth import WebhookSignatureVerifier
from clerk_sync.database import get_session
from clerk_sync.domains.users.service import UserSyncService
from clerk_sync.domains.users.store import SqlAlchemyUserStore
from clerk_sync.exceptions import SigningSecretMissingError
from clerk_sync.ports import UserStorePort

logger = logging.getLogger("webhooks")


def get_webhook_verifier(request: Request) -> WebhookSignatureVerifier:
    """Return the verifier built at startup.

    The route never runs unverified: without a verifier every delivery is
    answered with 503.
    """
    verifier = getattr(request.app.state, "webhook_verifier", None)
    if verifier is None:
        logger.error(
            "Webhook received but no signing secret is configured",
            extra={"service": "webhooks"},
        )
        raise SigningSecretMissingError()
    return verifier


async def get_user_store(
    session: AsyncSession = Depends(get_session),
) -> UserStorePort:
    return SqlAlchemyUserStore(session)


def get_user_sync_service(
    request: Request,
    store: UserStorePort = Depends(get_user_store),
) -> UserSyncService:
    absorb_conflicts = getattr(request.app.state, "webhook_absorb_conflicts", True)
    return UserSyncService(store, absorb_conflicts=absorb_conflicts)
