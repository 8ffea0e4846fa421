"""Dependencies for FastAPI routes."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.database import async_session_maker, bind_actor, get_db
from app.core.permissions import Role, is_admin, is_sales_staff
from app.core.security import Identity, decode_access_token, identity_from_claims
from app.models.profile import Profile
from app.services import profile as profile_service
from app.services.identity import IdentityProvider
from app.services.session import SessionRecord, SessionRegistry

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for work that outlives a request (profile cache loads)."""
    return async_session_maker


def get_identity_provider(request: Request) -> IdentityProvider:
    """Identity provider client shared by the application."""
    return request.app.state.identity_provider


def get_session_registry(request: Request) -> SessionRegistry:
    """Registry of signed-in browser sessions."""
    return request.app.state.session_registry


def get_session_record(
    request: Request,
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
) -> SessionRecord | None:
    """Browser session behind the session cookie, if any."""
    return registry.get(request.cookies.get(settings.SESSION_COOKIE_NAME))


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Identity:
    """Get the verified identity from the provider's bearer access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise credentials_exception

    identity = identity_from_claims(claims)
    if identity is None:
        raise credentials_exception

    return identity


async def get_current_profile(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Profile:
    """
    Get the acting profile and bind it to the request's database session.

    Rows read or written through `db` afterwards are checked against the
    database's row-security policies for this actor.
    """
    await bind_actor(db, identity.id)
    profile = await profile_service.get_profile_by_id(db, identity.id)

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Profile not found",
        )

    return profile


async def get_approved_profile(
    profile: Annotated[Profile, Depends(get_current_profile)],
) -> Profile:
    """Acting profile, which must have been approved by a superadmin."""
    if not profile.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account pending approval",
        )
    return profile


def require_group(*predicates: Callable[[Role], bool]):
    """Dependency factory to check if the approved actor's role passes any of the group predicates."""

    async def group_checker(
        current_profile: Annotated[Profile, Depends(get_approved_profile)],
    ) -> Profile:
        if not any(predicate(current_profile.role) for predicate in predicates):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_profile

    return group_checker


# Common dependency aliases
CurrentProfile = Annotated[Profile, Depends(get_current_profile)]
ApprovedProfile = Annotated[Profile, Depends(get_approved_profile)]
AdminProfile = Annotated[Profile, Depends(require_group(is_admin))]
StudentManagerProfile = Annotated[Profile, Depends(require_group(is_sales_staff, is_admin))]
