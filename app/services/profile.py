"""Profile service."""

from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import bind_actor
from app.core.errors import AuthorizationDenied, RegistrationError
from app.core.permissions import SELF_REGISTERABLE_ROLES, Role, is_sales_staff
from app.core.security import Identity
from app.models.profile import Profile
from app.schemas.profile import ProfileResponse, ProfileUpdate


async def get_profile_by_id(db: AsyncSession, profile_id: UUID) -> Profile | None:
    """Get profile by ID."""
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    """Get profile by email."""
    result = await db.execute(select(Profile).where(Profile.email == email.lower()))
    return result.scalar_one_or_none()


async def get_profiles(
    db: AsyncSession,
    *,
    role: Role | None = None,
    is_approved: bool | None = None,
    search: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Profile], int]:
    """Get list of profiles with optional filters."""
    query = select(Profile)
    count_query = select(func.count()).select_from(Profile)

    if role is not None:
        query = query.where(Profile.role == role)
        count_query = count_query.where(Profile.role == role)

    if is_approved is not None:
        query = query.where(Profile.is_approved == is_approved)
        count_query = count_query.where(Profile.is_approved == is_approved)

    if search:
        search_filter = Profile.email.ilike(f"%{search}%") | Profile.full_name.ilike(f"%{search}%")
        query = query.where(search_filter)
        count_query = count_query.where(search_filter)

    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    query = query.order_by(Profile.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def create_profile(
    db: AsyncSession,
    identity: Identity,
    *,
    full_name: str | None,
    role: Role,
    sales_id: str | None = None,
    is_approved: bool = False,
) -> Profile:
    """Create the profile of a newly registered identity."""
    profile = Profile(
        id=identity.id,
        email=identity.email.lower(),
        full_name=full_name,
        role=role,
        is_approved=is_approved,
        sales_id=sales_id if is_sales_staff(role) else None,
    )

    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


async def update_profile(db: AsyncSession, profile: Profile, profile_data: ProfileUpdate) -> Profile:
    """Update a profile's role, approval, sales id or name."""
    update_data = profile_data.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(profile, field, value)

    # A sales id only makes sense for sales staff
    if not is_sales_staff(profile.role):
        profile.sales_id = None

    await db.commit()
    await db.refresh(profile)
    return profile


async def delete_profile(db: AsyncSession, profile: Profile) -> None:
    """Delete a profile. Owned students and their payments go with it."""
    await db.delete(profile)
    await db.commit()


async def load_profile_snapshot(
    session_factory: async_sessionmaker[AsyncSession], identity_id: UUID
) -> ProfileResponse | None:
    """Read an actor's own profile in a fresh session scoped to that actor."""
    async with session_factory() as db:
        await bind_actor(db, identity_id)
        profile = await get_profile_by_id(db, identity_id)
        return ProfileResponse.model_validate(profile) if profile else None


async def create_registered_profile(
    session_factory: async_sessionmaker[AsyncSession],
    identity: Identity,
    metadata: dict[str, Any],
) -> ProfileResponse:
    """Create the unapproved profile of a just-registered identity from its sign-up metadata."""
    role = Role(metadata.get("role", Role.TEACHER))
    if role not in SELF_REGISTERABLE_ROLES:
        raise AuthorizationDenied(f"Role {role.value} cannot be self-registered")

    async with session_factory() as db:
        await bind_actor(db, identity.id)
        try:
            profile = await create_profile(
                db,
                identity,
                full_name=metadata.get("full_name"),
                role=role,
                sales_id=metadata.get("sales_id"),
            )
        except IntegrityError as exc:
            await db.rollback()
            raise RegistrationError("An account with this email already exists") from exc
        except SQLAlchemyError as exc:
            await db.rollback()
            raise RegistrationError("Failed to create user profile") from exc
        return ProfileResponse.model_validate(profile)
