"""
Page navigation routes.

Every page passes through the session's NavigationGuard before anything
is produced. Redirect decisions answer 303, a profile that still cannot
be loaded answers 503, and an allowed page answers with a JSON page
descriptor carrying the actor summary and navigation menu.
"""

import logging
from dataclasses import asdict
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.access import (
    FORBIDDEN_PATH,
    HOME_PATH,
    LOGIN_PATH,
    PENDING_APPROVAL_PATH,
    REGISTER_PATH,
    AccessDecision,
)
from app.core.config import settings
from app.core.database import bind_actor
from app.core.deps import (
    get_identity_provider,
    get_session_factory,
    get_session_record,
    get_session_registry,
)
from app.core.guard import AnonymousSession, Navigation, NavigationGuard
from app.core.route_permissions import get_navigation_items, resolve_permission
from app.schemas.auth import RegisterRequest
from app.services import admin as admin_service
from app.services import profile as profile_service
from app.services.identity import IdentityProvider
from app.services.session import ProfileSession, SessionRecord, SessionRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

STATIC_PAGES = {
    HOME_PATH: "dashboard",
    LOGIN_PATH: "login",
    REGISTER_PATH: "register",
    PENDING_APPROVAL_PATH: "pending-approval",
    FORBIDDEN_PATH: "forbidden",
}

RETRY_AFTER_SECONDS = "1"


# ============== Helper Functions ==============


def build_session(
    provider: IdentityProvider,
    session_factory: async_sessionmaker[AsyncSession],
) -> ProfileSession:
    """Create an empty ProfileSession wired to the database and provider."""

    async def load(identity_id: UUID):
        return await profile_service.load_profile_snapshot(session_factory, identity_id)

    async def create(identity, metadata):
        return await profile_service.create_registered_profile(session_factory, identity, metadata)

    async def delete(user_id: UUID) -> None:
        async with session_factory() as db:
            await bind_actor(db, session.identity.id)
            await admin_service.verify_admin(db, session.identity.id)
            await admin_service.delete_user(db, provider, user_id)

    session = ProfileSession(
        provider,
        load,
        profile_creator=create,
        user_deleter=delete,
    )
    return session


def normalize_path(path: str) -> str:
    path = "/" + path.strip("/")
    return path


def page_name(path: str) -> str | None:
    """Name of the page served at `path`, or None if there is none."""
    if path in STATIC_PAGES:
        return STATIC_PAGES[path]
    if resolve_permission(path) is not None:
        return path.strip("/").replace("/", "-")
    return None


def guard_for(record: SessionRecord | None) -> NavigationGuard:
    if record is not None:
        return record.guard
    return NavigationGuard(AnonymousSession())


def blocked_response(navigation: Navigation, record: SessionRecord | None) -> Response | None:
    """Response for a navigation that may not render its page, else None."""
    if navigation.superseded:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": "Navigation superseded"},
        )

    if navigation.decision is AccessDecision.DEFER:
        detail = (record.session.error if record else None) or "Profile is not loaded yet"
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": detail},
            headers={"Retry-After": RETRY_AFTER_SECONDS},
        )

    if navigation.redirect_to is not None:
        return RedirectResponse(navigation.redirect_to, status_code=status.HTTP_303_SEE_OTHER)

    return None


def actor_summary(record: SessionRecord | None) -> dict | None:
    if record is None or record.session.profile is None:
        return None
    profile = record.session.profile
    return {
        "id": str(profile.id),
        "email": profile.email,
        "full_name": profile.full_name,
        "role": profile.role.value,
        "is_approved": profile.is_approved,
    }


def set_session_cookie(response: Response, record: SessionRecord) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        record.session_id,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


# ============== Form Endpoints ==============


@router.post(LOGIN_PATH)
async def login(
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
    record: Annotated[SessionRecord | None, Depends(get_session_record)],
) -> Response:
    """
    Sign in with email and password.

    An existing browser session is reused; signing in as someone else
    drops what it had cached for the previous actor.
    """
    session = record.session if record is not None else build_session(provider, session_factory)

    result = await session.login(email, password)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"page": "login", "error": result.error},
        )

    if record is None:
        record = registry.create(session)

    navigation = await record.guard.navigate(HOME_PATH)
    target = navigation.redirect_to or HOME_PATH
    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, record)
    return response


@router.post(REGISTER_PATH)
async def register(
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
    full_name: Annotated[str, Form()],
    provider: Annotated[IdentityProvider, Depends(get_identity_provider)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)],
    record: Annotated[SessionRecord | None, Depends(get_session_record)],
    role: Annotated[str, Form()] = "teacher",
    sales_id: Annotated[str | None, Form()] = None,
) -> Response:
    """Register a new account. It must be approved before any section opens."""
    navigation = await guard_for(record).navigate(REGISTER_PATH)
    blocked = blocked_response(navigation, record)
    if blocked is not None:
        return blocked

    try:
        data = RegisterRequest(
            email=email,
            password=password,
            full_name=full_name,
            role=role,
            sales_id=sales_id or None,
        )
    except ValidationError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "page": "register",
                "errors": [error["msg"] for error in exc.errors()],
            },
        )

    session = build_session(provider, session_factory)
    result = await session.register(
        data.email, data.password, data.full_name, data.role, data.sales_id
    )
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"page": "register", "error": result.error},
        )

    return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.post("/auth/logout")
async def logout(
    registry: Annotated[SessionRegistry, Depends(get_session_registry)],
    record: Annotated[SessionRecord | None, Depends(get_session_record)],
) -> Response:
    """Sign out and forget the browser session."""
    if record is not None:
        result = await record.session.logout()
        if not result.success:
            logger.warning("Provider sign-out failed: %s", result.error)
        registry.delete(record.session_id)

    response = RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


@router.post("/users/delete")
async def delete_user(
    user_id: Annotated[UUID, Form()],
    record: Annotated[SessionRecord | None, Depends(get_session_record)],
) -> Response:
    """Delete a user's account from the users section. Superadmin only."""
    navigation = await guard_for(record).navigate("/users")
    blocked = blocked_response(navigation, record)
    if blocked is not None:
        return blocked

    if user_id == record.session.identity.id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "You cannot delete your own account"},
        )

    result = await record.session.delete_user(user_id)
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": result.error},
        )

    return RedirectResponse("/users", status_code=status.HTTP_303_SEE_OTHER)


# ============== Pages ==============


@router.get("/{path:path}")
async def page(
    path: str,
    record: Annotated[SessionRecord | None, Depends(get_session_record)],
) -> Response:
    """Serve any page behind the navigation guard."""
    path = normalize_path(path)

    navigation = await guard_for(record).navigate(path)
    blocked = blocked_response(navigation, record)
    if blocked is not None:
        return blocked

    name = page_name(path)
    if name is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Page not found"},
        )

    role = record.session.role if record is not None else None
    return JSONResponse(
        content={
            "page": name,
            "path": path,
            "actor": actor_summary(record),
            "navigation": [asdict(item) for item in get_navigation_items(role)],
        }
    )
