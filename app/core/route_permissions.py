"""Declarative route permission table and path matching.

Paths that match no entry are open to every authenticated, approved actor.
Every new protected page must be added here or it becomes visible to all roles.
"""

from dataclasses import dataclass
from typing import Sequence

from app.core.permissions import (
    Role,
    RoleGroup,
    has_any_role,
    is_admin,
    is_management,
    is_sales_staff,
    is_teaching_staff,
    roles_in,
)

WILDCARD_SUFFIX = "/*"


@dataclass(frozen=True)
class RoutePermission:
    """A path pattern and the roles allowed to open it."""

    path: str
    allowed_roles: frozenset[Role]
    description: str = ""

    @property
    def is_wildcard(self) -> bool:
        return self.path.endswith(WILDCARD_SUFFIX)

    @property
    def prefix(self) -> str:
        """Path prefix matched by a wildcard entry, including the trailing slash."""
        return self.path[: -len(WILDCARD_SUFFIX)] + "/"


ADMIN_ONLY = roles_in(RoleGroup.ADMIN)
TEACHING_AND_ADMIN = roles_in(RoleGroup.TEACHING_STAFF, RoleGroup.ADMIN)
SALES_AND_ADMIN = roles_in(RoleGroup.SALES_STAFF, RoleGroup.ADMIN)
MANAGEMENT_ROLES = roles_in(RoleGroup.MANAGEMENT)
SALES_ONLY = roles_in(RoleGroup.SALES_STAFF)


def _section(path: str, roles: frozenset[Role], description: str) -> list[RoutePermission]:
    """Entries for a section page and all of its sub-pages."""
    return [
        RoutePermission(path, roles, description),
        RoutePermission(path + WILDCARD_SUFFIX, roles, f"{description} sub-pages"),
    ]


PROTECTED_ROUTES: tuple[RoutePermission, ...] = (
    *_section("/users", ADMIN_ONLY, "User management - superadmin only"),
    *_section("/students", TEACHING_AND_ADMIN, "Student management - teaching staff"),
    *_section("/lessons", TEACHING_AND_ADMIN, "Lesson management - teaching staff"),
    *_section("/evaluations", TEACHING_AND_ADMIN, "Student evaluations - teaching staff"),
    *_section("/leads", SALES_AND_ADMIN, "Lead management - sales staff"),
    *_section("/reports", MANAGEMENT_ROLES, "Reports and analytics - management only"),
    *_section("/settings", MANAGEMENT_ROLES, "System settings - management only"),
    *_section("/sales", SALES_ONLY, "Sales workspace - own students and payments"),
    RoutePermission("/tariffs", ADMIN_ONLY, "Tariff management - superadmin only"),
)


def resolve_permission(
    path: str,
    table: Sequence[RoutePermission] = PROTECTED_ROUTES,
) -> frozenset[Role] | None:
    """
    Return the roles allowed on a path, or None when the path is unrestricted.

    Exact entries win over wildcards. Among wildcards the longest prefix wins,
    ties go to the entry declared first. A wildcard never matches its bare prefix.
    """
    for entry in table:
        if not entry.is_wildcard and entry.path == path:
            return entry.allowed_roles

    best: RoutePermission | None = None
    for entry in table:
        if not entry.is_wildcard or not path.startswith(entry.prefix):
            continue
        if best is None or len(entry.prefix) > len(best.prefix):
            best = entry

    return best.allowed_roles if best else None


def can_access_route(
    role: Role | str | None,
    path: str,
    table: Sequence[RoutePermission] = PROTECTED_ROUTES,
) -> bool:
    """Check if a role may open a path. Superadmin may open every path."""
    if role is None:
        return False
    if is_admin(role):
        return True

    allowed_roles = resolve_permission(path, table)
    if allowed_roles is None:
        return True
    return has_any_role(role, allowed_roles)


def get_accessible_routes(
    role: Role | str | None,
    table: Sequence[RoutePermission] = PROTECTED_ROUTES,
) -> list[RoutePermission]:
    """Table entries a role may open."""
    if role is None:
        return []
    return [entry for entry in table if can_access_route(role, entry.path.removesuffix(WILDCARD_SUFFIX), table)]


@dataclass(frozen=True)
class NavigationItem:
    """Entry of the main navigation menu."""

    name: str
    path: str
    icon: str


def get_navigation_items(role: Role | str | None) -> list[NavigationItem]:
    """Build the navigation menu for a role."""
    if role is None:
        return []

    items = [NavigationItem("Dashboard", "/", "Home")]

    if is_admin(role):
        items.append(NavigationItem("Users", "/users", "Users"))
        items.append(NavigationItem("Tariffs", "/tariffs", "Tag"))

    if is_teaching_staff(role) or is_admin(role):
        items.extend([
            NavigationItem("Students", "/students", "GraduationCap"),
            NavigationItem("Lessons", "/lessons", "BookOpen"),
            NavigationItem("Evaluations", "/evaluations", "FileText"),
        ])

    if is_sales_staff(role):
        items.append(NavigationItem("My Students", "/sales/students", "Wallet"))

    if is_sales_staff(role) or is_admin(role):
        items.append(NavigationItem("Leads", "/leads", "Target"))

    if is_management(role):
        items.extend([
            NavigationItem("Reports", "/reports", "BarChart3"),
            NavigationItem("Settings", "/settings", "Settings"),
        ])

    return [item for item in items if can_access_route(role, item.path)]
