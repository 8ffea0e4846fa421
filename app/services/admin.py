"""Privileged user administration.

Runs server-side only. The acting profile is re-read from the database
before anything is removed.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AdminOperationError, AuthorizationDenied, IdentityProviderError
from app.core.permissions import is_admin
from app.models.profile import Profile
from app.services import profile as profile_service
from app.services.identity import IdentityProvider

logger = logging.getLogger(__name__)


async def verify_admin(db: AsyncSession, actor_id: UUID) -> Profile:
    """Load the acting profile and require it to be an approved superadmin right now."""
    actor = await profile_service.get_profile_by_id(db, actor_id)
    if actor is None or not actor.is_approved or not is_admin(actor.role):
        logger.warning("User deletion refused for %s: not an approved superadmin", actor_id)
        raise AuthorizationDenied("Only a superadmin can delete users")
    return actor


async def delete_user(db: AsyncSession, provider: IdentityProvider, user_id: UUID) -> None:
    """
    Delete a user's identity and profile in one operation.

    The identity goes first; an identity the provider no longer knows still
    has its profile removed so nothing is left orphaned.
    """
    try:
        await provider.delete_identity(user_id)
    except IdentityProviderError as exc:
        if exc.status_code != 404:
            logger.error("Identity deletion failed for %s: %s", user_id, exc.message)
            raise AdminOperationError(f"Failed to delete user from auth: {exc.message}") from exc
        logger.info("Identity %s already gone, removing profile only", user_id)

    profile = await profile_service.get_profile_by_id(db, user_id)
    if profile is None:
        logger.info("Deleted identity %s (no profile)", user_id)
        return

    try:
        await profile_service.delete_profile(db, profile)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Profile deletion failed for %s after identity removal", user_id)
        raise AdminOperationError("Failed to delete user profile") from exc

    logger.info("Deleted user %s", user_id)
