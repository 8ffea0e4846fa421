"""Authentication routes for API clients."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.deps import get_identity_provider, get_session_factory
from app.core.errors import AccessControlError, AuthenticationError, IdentityProviderError
from app.schemas.auth import LoginRequest, RegisterRequest
from app.schemas.profile import ProfileResponse
from app.services import profile as profile_service
from app.services.identity import IdentityProvider, discard_identity

router = APIRouter(prefix="/auth", tags=["Authentication"])


class Token(BaseModel):
    """Provider tokens handed back to API clients."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=Token)
async def login(
    login_data: LoginRequest,
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> Token:
    """Sign in with email and password through the identity provider."""
    try:
        auth = await provider.sign_in(login_data.email, login_data.password)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except IdentityProviderError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Identity provider unavailable",
        ) from exc

    return Token(access_token=auth.access_token, refresh_token=auth.refresh_token)


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterRequest,
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
) -> ProfileResponse:
    """Register a new account. It cannot use protected pages until a superadmin approves it."""
    metadata = {"full_name": register_data.full_name, "role": register_data.role.value}
    if register_data.sales_id:
        metadata["sales_id"] = register_data.sales_id

    try:
        identity = await provider.sign_up(register_data.email, register_data.password, metadata)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc
    except IdentityProviderError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Identity provider unavailable",
        ) from exc

    try:
        return await profile_service.create_registered_profile(session_factory, identity, metadata)
    except AccessControlError as exc:
        await discard_identity(provider, identity.id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc
