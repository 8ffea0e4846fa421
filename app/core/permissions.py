"""User roles and role groups."""

from enum import Enum


class Role(str, Enum):
    """Actor roles in the system."""

    SUPERADMIN = "superadmin"  # Full access, approves and manages users
    HEAD_SALES = "head_sales"  # Leads the sales team
    SALES = "sales"  # Sales manager, owns students and their payments
    HEAD_TEACHING = "head_teaching"  # Leads the teaching team
    TEACHER = "teacher"  # Teaches lessons and evaluates students


class RoleGroup(str, Enum):
    """Semantic groupings used by authorization checks."""

    TEACHING_STAFF = "teaching_staff"
    SALES_STAFF = "sales_staff"
    MANAGEMENT = "management"
    ADMIN = "admin"


# Group membership for every role. Each role must appear here exactly once.
ROLE_GROUPS: dict[Role, frozenset[RoleGroup]] = {
    Role.SUPERADMIN: frozenset({RoleGroup.MANAGEMENT, RoleGroup.ADMIN}),
    Role.HEAD_SALES: frozenset({RoleGroup.SALES_STAFF, RoleGroup.MANAGEMENT}),
    Role.SALES: frozenset({RoleGroup.SALES_STAFF}),
    Role.HEAD_TEACHING: frozenset({RoleGroup.TEACHING_STAFF, RoleGroup.MANAGEMENT}),
    Role.TEACHER: frozenset({RoleGroup.TEACHING_STAFF}),
}

_unmapped = set(Role) - set(ROLE_GROUPS)
if _unmapped:
    raise RuntimeError(f"Roles without group mapping: {sorted(r.value for r in _unmapped)}")


def in_group(role: Role | str | None, group: RoleGroup) -> bool:
    """Check if a role belongs to a group. Unknown or missing roles belong to none."""
    if role is None:
        return False
    try:
        role = Role(role)
    except ValueError:
        return False
    return group in ROLE_GROUPS[role]


def is_teaching_staff(role: Role | str | None) -> bool:
    """Teacher or head of teaching."""
    return in_group(role, RoleGroup.TEACHING_STAFF)


def is_sales_staff(role: Role | str | None) -> bool:
    """Sales manager or head of sales."""
    return in_group(role, RoleGroup.SALES_STAFF)


def is_management(role: Role | str | None) -> bool:
    """Head roles and superadmin."""
    return in_group(role, RoleGroup.MANAGEMENT)


def is_admin(role: Role | str | None) -> bool:
    """Superadmin only."""
    return in_group(role, RoleGroup.ADMIN)


def roles_in(*groups: RoleGroup) -> frozenset[Role]:
    """Return every role that belongs to at least one of the given groups."""
    return frozenset(
        role for role, role_groups in ROLE_GROUPS.items() if role_groups & set(groups)
    )


def has_any_role(role: Role | str | None, roles: set[Role] | frozenset[Role]) -> bool:
    """Check if a role is one of the given roles."""
    if role is None:
        return False
    try:
        return Role(role) in roles
    except ValueError:
        return False


# Roles an actor may pick for themselves when registering
SELF_REGISTERABLE_ROLES = frozenset(role for role in Role if not is_admin(role))
