"""Profile routes."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import AdminProfile, CurrentProfile
from app.core.permissions import Role
from app.core.route_permissions import NavigationItem, get_navigation_items
from app.schemas.profile import ProfileListResponse, ProfileResponse, ProfileUpdate
from app.services import profile as profile_service

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/me", response_model=ProfileResponse)
async def get_me(current_profile: CurrentProfile) -> ProfileResponse:
    """Get own profile. Available before approval so the client can poll its status."""
    return ProfileResponse.model_validate(current_profile)


@router.get("/me/navigation", response_model=list[NavigationItem])
async def get_my_navigation(current_profile: CurrentProfile) -> list[NavigationItem]:
    """Navigation menu for the acting profile. Empty until approved."""
    if not current_profile.is_approved:
        return []
    return get_navigation_items(current_profile.role)


@router.get("", response_model=ProfileListResponse)
async def list_profiles(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
    role: Role | None = Query(None, description="Filter by role"),
    is_approved: bool | None = Query(None, description="Filter by approval status"),
    search: str | None = Query(None, description="Search by email or name"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Max number of records"),
) -> ProfileListResponse:
    """List profiles. Superadmin only."""
    profiles, total = await profile_service.get_profiles(
        db,
        role=role,
        is_approved=is_approved,
        search=search,
        skip=skip,
        limit=limit,
    )

    return ProfileListResponse(
        items=[ProfileResponse.model_validate(p) for p in profiles],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> ProfileResponse:
    """Get a profile by ID. Superadmin only."""
    profile = await profile_service.get_profile_by_id(db, profile_id)

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    return ProfileResponse.model_validate(profile)


@router.patch("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: UUID,
    profile_data: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_profile: AdminProfile,
) -> ProfileResponse:
    """
    Approve, re-role or rename a profile. Superadmin only.

    A superadmin cannot revoke their own approval or role.
    """
    profile = await profile_service.get_profile_by_id(db, profile_id)

    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    if profile.id == current_profile.id:
        if profile_data.is_approved is False or (
            profile_data.role is not None and profile_data.role != current_profile.role
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot change your own role or approval",
            )

    updated_profile = await profile_service.update_profile(db, profile, profile_data)
    return ProfileResponse.model_validate(updated_profile)
