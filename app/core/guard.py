"""Navigation guard.

Runs before every page is produced. It reads the session's current state,
asks `decide_access` for a decision and tells the caller where to go.
While the profile is still loading it waits for the shared fetch and then
decides again; a navigation overtaken by a newer one is abandoned.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from app.core.access import AccessDecision, decide_access, redirect_target
from app.core.permissions import Role
from app.core.route_permissions import PROTECTED_ROUTES, RoutePermission

logger = logging.getLogger(__name__)


class SessionState(Protocol):
    """What the guard needs to know about a session."""

    is_authenticated: bool
    is_profile_loaded: bool
    is_approved: bool
    role: Role | None

    async def fetch_profile(self, force: bool = False): ...


@dataclass(frozen=True)
class Navigation:
    """Result of guarding one navigation."""

    path: str
    decision: AccessDecision
    redirect_to: str | None = None
    superseded: bool = False

    @property
    def allowed(self) -> bool:
        return self.decision is AccessDecision.ALLOW and not self.superseded


class NavigationGuard:
    """Guards page navigation for one session."""

    def __init__(
        self,
        session: SessionState,
        table: Sequence[RoutePermission] = PROTECTED_ROUTES,
    ) -> None:
        self.session = session
        self.table = table
        self._latest = 0

    def evaluate(self, path: str) -> AccessDecision:
        """Decide from the session's current state. No side effects."""
        return decide_access(
            is_authenticated=self.session.is_authenticated,
            is_profile_loaded=self.session.is_profile_loaded,
            is_approved=self.session.is_approved,
            role=self.session.role,
            target_path=path,
            table=self.table,
        )

    async def navigate(self, path: str) -> Navigation:
        """
        Guard a navigation to `path`.

        A DEFER decision waits for the profile fetch and decides again. If the
        profile still is not there the result stays DEFER, with no redirect.
        """
        self._latest += 1
        ticket = self._latest

        decision = self.evaluate(path)
        if decision is AccessDecision.DEFER:
            await self.session.fetch_profile()
            if ticket != self._latest:
                logger.debug("Navigation to %s superseded", path)
                return Navigation(path=path, decision=AccessDecision.DEFER, superseded=True)
            decision = self.evaluate(path)

        target = redirect_target(decision)
        if target is not None:
            logger.debug("Navigation to %s redirected to %s (%s)", path, target, decision.value)
        return Navigation(path=path, decision=decision, redirect_to=target)


class AnonymousSession:
    """Session state of a visitor who has not signed in."""

    is_authenticated = False
    is_profile_loaded = False
    is_approved = False
    role = None

    async def fetch_profile(self, force: bool = False):
        return None
