"""Privileged administration routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminProfile, get_identity_provider
from app.core.errors import AdminOperationError
from app.schemas.auth import DeleteUserRequest, DeleteUserResponse
from app.services import admin as admin_service
from app.services.identity import IdentityProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/users/delete", response_model=DeleteUserResponse)
async def delete_user(
    delete_data: DeleteUserRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    current_profile: AdminProfile,
) -> DeleteUserResponse:
    """Delete a user's identity and profile. Superadmin only."""
    if delete_data.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User ID is required",
        )

    if delete_data.user_id == current_profile.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )

    logger.info("Superadmin %s deleting user %s", current_profile.id, delete_data.user_id)
    try:
        await admin_service.delete_user(db, provider, delete_data.user_id)
    except AdminOperationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server error: {exc.message}",
        ) from exc

    return DeleteUserResponse()
