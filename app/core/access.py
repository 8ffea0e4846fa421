"""Access decisions for page navigation.

`decide_access` is pure: the same inputs always give the same decision.
Callers perform the redirect; `DEFER` means wait for the profile to load.
"""

from enum import Enum
from typing import Sequence

from app.core.permissions import Role
from app.core.route_permissions import PROTECTED_ROUTES, RoutePermission, can_access_route

HOME_PATH = "/"
LOGIN_PATH = "/auth/login"
REGISTER_PATH = "/auth/register"
PENDING_APPROVAL_PATH = "/auth/pending-approval"
FORBIDDEN_PATH = "/403"

# Pages reachable without authentication
PUBLIC_ROUTES = frozenset({LOGIN_PATH, REGISTER_PATH})


class AccessDecision(str, Enum):
    """Outcome of an access check for one navigation."""

    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_PENDING_APPROVAL = "redirect_pending_approval"
    REDIRECT_HOME = "redirect_home"
    REDIRECT_FORBIDDEN = "redirect_forbidden"
    DEFER = "defer"


REDIRECT_TARGETS: dict[AccessDecision, str] = {
    AccessDecision.REDIRECT_LOGIN: LOGIN_PATH,
    AccessDecision.REDIRECT_PENDING_APPROVAL: PENDING_APPROVAL_PATH,
    AccessDecision.REDIRECT_HOME: HOME_PATH,
    AccessDecision.REDIRECT_FORBIDDEN: FORBIDDEN_PATH,
}


def is_public_route(path: str) -> bool:
    """Check if a page is reachable without authentication."""
    return path in PUBLIC_ROUTES


def redirect_target(decision: AccessDecision) -> str | None:
    """Path to navigate to for a decision, None for ALLOW and DEFER."""
    return REDIRECT_TARGETS.get(decision)


def decide_access(
    *,
    is_authenticated: bool,
    is_profile_loaded: bool,
    is_approved: bool,
    role: Role | str | None,
    target_path: str,
    is_public: bool | None = None,
    table: Sequence[RoutePermission] = PROTECTED_ROUTES,
) -> AccessDecision:
    """
    Decide what happens when an actor navigates to a path.

    Rules are checked in order, the first match wins:
    - anonymous actors may only open public pages
    - nothing is decided for an authenticated actor until the profile is loaded
    - unapproved actors are held on the pending-approval page
    - approved actors are sent home from the pending-approval page
    - approved actors on protected pages are checked against the route table
    - authenticated actors never see the login/register forms
    """
    if is_public is None:
        is_public = is_public_route(target_path)

    if not is_authenticated:
        return AccessDecision.ALLOW if is_public else AccessDecision.REDIRECT_LOGIN

    if not is_profile_loaded:
        return AccessDecision.DEFER

    if is_public:
        if not is_approved:
            return AccessDecision.REDIRECT_PENDING_APPROVAL
        return AccessDecision.REDIRECT_HOME

    if not is_approved:
        if target_path == PENDING_APPROVAL_PATH:
            return AccessDecision.ALLOW
        return AccessDecision.REDIRECT_PENDING_APPROVAL

    if target_path == PENDING_APPROVAL_PATH:
        return AccessDecision.REDIRECT_HOME

    if not can_access_route(role, target_path, table):
        return AccessDecision.REDIRECT_FORBIDDEN
    return AccessDecision.ALLOW
