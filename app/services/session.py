"""
Per-session identity and profile cache.

A ProfileSession is created for one browser session at login and dropped
at logout. It holds the signed-in identity and a snapshot of the actor's
profile, loaded at most once at a time and reused until a forced refresh
or logout. Nothing here is module-level state: the SessionRegistry owns
the instances and hands them to the navigation guard and the page layer.
"""

import asyncio
import logging
import secrets
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from app.core.config import settings
from app.core.errors import (
    AccessControlError,
    AuthenticationError,
    AuthorizationDenied,
    IdentityProviderError,
    ProfileFetchError,
)
from app.core.guard import NavigationGuard
from app.core.permissions import Role, has_any_role, is_admin
from app.core.security import Identity
from app.schemas.profile import ProfileResponse
from app.services.identity import AuthSession, IdentityProvider, discard_identity

logger = logging.getLogger(__name__)

ProfileLoader = Callable[[UUID], Awaitable[ProfileResponse | None]]
ProfileCreator = Callable[[Identity, dict[str, Any]], Awaitable[Any]]
UserDeleter = Callable[[UUID], Awaitable[None]]


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a session operation, shown to the actor as-is."""

    success: bool
    error: str | None = None
    identity: Identity | None = None
    profile: ProfileResponse | None = None
    is_approved: bool = False


class ProfileSession:
    """Identity and profile state of one signed-in browser session."""

    def __init__(
        self,
        provider: IdentityProvider,
        profile_loader: ProfileLoader,
        *,
        profile_creator: ProfileCreator | None = None,
        user_deleter: UserDeleter | None = None,
        fetch_timeout: float | None = None,
    ) -> None:
        self._provider = provider
        self._load_profile = profile_loader
        self._create_profile = profile_creator
        self._delete_user = user_deleter
        self._fetch_timeout = settings.PROFILE_FETCH_TIMEOUT if fetch_timeout is None else fetch_timeout

        self.identity: Identity | None = None
        self._auth: AuthSession | None = None
        self._profile: ProfileResponse | None = None
        self._loaded = False
        self._inflight: asyncio.Task | None = None
        # Bumped whenever cached state is cleared; late fetch results from an
        # older epoch are dropped.
        self._epoch = 0

        self.error: str | None = None
        self.is_loading = False

    # ============== Derived state ==============

    @property
    def profile(self) -> ProfileResponse | None:
        return self._profile

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def is_profile_loaded(self) -> bool:
        return self._loaded and self._profile is not None

    @property
    def is_approved(self) -> bool:
        return bool(self._profile and self._profile.is_approved)

    @property
    def role(self) -> Role | None:
        return self._profile.role if self._profile else None

    @property
    def access_token(self) -> str | None:
        return self._auth.access_token if self._auth else None

    @property
    def is_fetching(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def has_role(self, role: Role) -> bool:
        return self.role == role

    def has_any_role(self, roles: set[Role] | frozenset[Role]) -> bool:
        return has_any_role(self.role, roles)

    # ============== Identity changes ==============

    def _clear(self) -> None:
        self._epoch += 1
        self._profile = None
        self._loaded = False
        self._inflight = None

    def set_identity(self, identity: Identity | None, auth: AuthSession | None = None) -> None:
        """Follow the provider's current identity. A different identity drops cached state."""
        if identity is None or identity != self.identity:
            self._clear()
        self.identity = identity
        self._auth = auth if identity is not None else None

    # ============== Profile fetch ==============

    async def fetch_profile(self, force: bool = False) -> ProfileResponse | None:
        """
        Load the actor's profile.

        Concurrent callers share the fetch already in flight, forced or not.
        A cached profile is returned unless `force` is set. Failures are
        recorded in `error` and leave the profile unloaded.
        """
        if self.identity is None:
            return None

        if self.is_fetching:
            return await asyncio.shield(self._inflight)

        if self.is_profile_loaded and not force:
            return self._profile

        self._inflight = asyncio.create_task(self._fetch(self._epoch, self.identity.id))
        return await asyncio.shield(self._inflight)

    async def _fetch(self, epoch: int, identity_id: UUID) -> ProfileResponse | None:
        profile: ProfileResponse | None = None
        error: str | None = None
        try:
            profile = await asyncio.wait_for(self._load_profile(identity_id), self._fetch_timeout)
            if profile is None:
                raise ProfileFetchError("Profile not found")
        except ProfileFetchError as exc:
            error = exc.message
        except asyncio.TimeoutError:
            error = "Profile fetch timed out"
        except Exception as exc:
            logger.exception("Profile fetch failed for %s", identity_id)
            error = f"Profile fetch failed: {exc.__class__.__name__}"

        if epoch != self._epoch:
            # Logged out or switched identity while loading
            return None

        if error is not None:
            logger.warning("Could not load profile %s: %s", identity_id, error)
            self._profile = None
            self._loaded = False
            self.error = error
            return None

        self._profile = profile
        self._loaded = True
        self.error = None
        return profile

    # ============== Verbs ==============

    async def login(self, email: str, password: str) -> AuthResult:
        """Sign in and load the profile. Failures are reported, never retried."""
        self.is_loading = True
        self.error = None
        try:
            auth = await self._provider.sign_in(email, password)
        except AuthenticationError as exc:
            logger.info("Sign-in rejected for an account")
            self.error = exc.message
            return AuthResult(success=False, error=exc.message)
        except IdentityProviderError as exc:
            self.error = exc.message
            return AuthResult(success=False, error=exc.message)
        finally:
            self.is_loading = False

        self.set_identity(auth.identity, auth)
        profile = await self.fetch_profile()
        return AuthResult(
            success=True,
            identity=auth.identity,
            profile=profile,
            is_approved=bool(profile and profile.is_approved),
        )

    async def register(
        self,
        email: str,
        password: str,
        full_name: str,
        role: Role,
        sales_id: str | None = None,
    ) -> AuthResult:
        """Register a new identity. Its profile starts out unapproved."""
        self.is_loading = True
        self.error = None
        metadata = {"full_name": full_name, "role": Role(role).value}
        if sales_id:
            metadata["sales_id"] = sales_id
        try:
            identity = await self._provider.sign_up(email, password, metadata)
            if self._create_profile is not None:
                await self._create_registered_profile(identity, metadata)
        except (AccessControlError, IdentityProviderError) as exc:
            self.error = exc.message
            return AuthResult(success=False, error=exc.message)
        finally:
            self.is_loading = False

        return AuthResult(success=True, identity=identity)

    async def _create_registered_profile(self, identity: Identity, metadata: dict[str, Any]) -> None:
        """Create the profile of a new identity; the identity is removed again if that fails."""
        try:
            await self._create_profile(identity, metadata)
        except AccessControlError:
            await discard_identity(self._provider, identity.id)
            raise

    async def logout(self) -> AuthResult:
        """Clear cached state, then revoke the provider session."""
        access_token = self.access_token
        self.set_identity(None)
        self.error = None

        if access_token is None:
            return AuthResult(success=True)

        self.is_loading = True
        try:
            await self._provider.sign_out(access_token)
        except IdentityProviderError as exc:
            self.error = exc.message
            return AuthResult(success=False, error=exc.message)
        finally:
            self.is_loading = False
        return AuthResult(success=True)

    async def delete_user(self, user_id: UUID) -> AuthResult:
        """Delete a user through the privileged server-side operation. Superadmin only."""
        if not (self.is_profile_loaded and self.is_approved and is_admin(self.role)):
            denied = AuthorizationDenied("Only a superadmin can delete users")
            self.error = denied.message
            return AuthResult(success=False, error=denied.message)
        if self._delete_user is None:
            raise RuntimeError("No user deleter configured")

        self.is_loading = True
        self.error = None
        try:
            await self._delete_user(user_id)
        except (AccessControlError, IdentityProviderError) as exc:
            self.error = exc.message
            return AuthResult(success=False, error=exc.message)
        finally:
            self.is_loading = False
        return AuthResult(success=True)


# ============== Registry ==============


def _now() -> float:
    return time.time()


@dataclass
class SessionRecord:
    session_id: str
    session: ProfileSession
    guard: NavigationGuard
    expires_at: float


class SessionRegistry:
    """
    Holds one ProfileSession per browser session.

    Cookies carry only the opaque session id. In-memory, so sessions do
    not survive a restart and are not shared between worker processes.
    """

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self.ttl_seconds = settings.SESSION_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._data: dict[str, SessionRecord] = {}

    def create(self, session: ProfileSession) -> SessionRecord:
        sid = secrets.token_urlsafe(24)
        record = SessionRecord(
            session_id=sid,
            session=session,
            guard=NavigationGuard(session),
            expires_at=_now() + self.ttl_seconds,
        )
        self._data[sid] = record
        return record

    def get(self, session_id: str | None) -> SessionRecord | None:
        if not session_id:
            return None
        record = self._data.get(session_id)
        if record is None:
            return None
        if record.expires_at < _now():
            self._data.pop(session_id, None)
            return None
        return record

    def delete(self, session_id: str | None) -> None:
        if session_id:
            self._data.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._data)
