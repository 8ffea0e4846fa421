"""Tests for roles and role groups."""

import pytest

from app.core.permissions import (
    ROLE_GROUPS,
    SELF_REGISTERABLE_ROLES,
    Role,
    RoleGroup,
    has_any_role,
    in_group,
    is_admin,
    is_management,
    is_sales_staff,
    is_teaching_staff,
    roles_in,
)


class TestRoleGroups:
    """Tests for group membership."""

    def test_every_role_is_mapped(self):
        assert set(ROLE_GROUPS) == set(Role)

    @pytest.mark.parametrize(
        "role, expected",
        [
            (Role.TEACHER, True),
            (Role.HEAD_TEACHING, True),
            (Role.SALES, False),
            (Role.HEAD_SALES, False),
            (Role.SUPERADMIN, False),
        ],
    )
    def test_teaching_staff(self, role, expected):
        assert is_teaching_staff(role) is expected

    @pytest.mark.parametrize(
        "role, expected",
        [
            (Role.SALES, True),
            (Role.HEAD_SALES, True),
            (Role.TEACHER, False),
            (Role.HEAD_TEACHING, False),
            (Role.SUPERADMIN, False),
        ],
    )
    def test_sales_staff(self, role, expected):
        assert is_sales_staff(role) is expected

    def test_management_is_heads_and_superadmin(self):
        assert roles_in(RoleGroup.MANAGEMENT) == {
            Role.SUPERADMIN,
            Role.HEAD_SALES,
            Role.HEAD_TEACHING,
        }
        assert not is_management(Role.SALES)
        assert not is_management(Role.TEACHER)

    def test_admin_is_superadmin_only(self):
        assert roles_in(RoleGroup.ADMIN) == {Role.SUPERADMIN}
        assert is_admin("superadmin")

    def test_string_roles_are_accepted(self):
        assert is_sales_staff("head_sales")
        assert in_group("teacher", RoleGroup.TEACHING_STAFF)

    def test_unknown_or_missing_role_belongs_to_no_group(self):
        for group in RoleGroup:
            assert not in_group(None, group)
            assert not in_group("janitor", group)

    def test_roles_in_several_groups(self):
        assert roles_in(RoleGroup.SALES_STAFF, RoleGroup.ADMIN) == {
            Role.SALES,
            Role.HEAD_SALES,
            Role.SUPERADMIN,
        }


class TestHasAnyRole:
    def test_member(self):
        assert has_any_role(Role.SALES, {Role.SALES, Role.TEACHER})

    def test_not_member(self):
        assert not has_any_role(Role.SUPERADMIN, {Role.SALES})

    def test_none_and_unknown(self):
        assert not has_any_role(None, set(Role))
        assert not has_any_role("janitor", set(Role))


def test_superadmin_cannot_self_register():
    assert Role.SUPERADMIN not in SELF_REGISTERABLE_ROLES
    assert SELF_REGISTERABLE_ROLES == set(Role) - {Role.SUPERADMIN}
