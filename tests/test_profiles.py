"""Tests for profiles API."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Role
from app.models.profile import Profile
from tests.conftest import FakeIdentityProvider, auth_header, create_profile


class TestMe:
    """Tests for the acting profile's own endpoints."""

    async def test_pending_actor_can_read_own_profile(self, client: AsyncClient, pending_teacher: Profile):
        response = await client.get("/api/v1/profiles/me", headers=auth_header(pending_teacher))
        assert response.status_code == 200
        assert response.json()["is_approved"] is False

    async def test_pending_actor_has_no_navigation(self, client: AsyncClient, pending_teacher: Profile):
        response = await client.get("/api/v1/profiles/me/navigation", headers=auth_header(pending_teacher))
        assert response.status_code == 200
        assert response.json() == []

    async def test_navigation_for_sales(self, client: AsyncClient, sales: Profile):
        response = await client.get("/api/v1/profiles/me/navigation", headers=auth_header(sales))
        assert response.status_code == 200
        paths = [item["path"] for item in response.json()]
        assert "/sales/students" in paths
        assert "/students" not in paths
        assert "/users" not in paths


class TestListProfiles:
    """Tests for listing profiles."""

    async def test_superadmin_lists_all(
        self, client: AsyncClient, superadmin: Profile, teacher: Profile, sales: Profile
    ):
        response = await client.get("/api/v1/profiles", headers=auth_header(superadmin))
        assert response.status_code == 200
        assert response.json()["total"] == 3

    async def test_filter_pending(
        self, client: AsyncClient, superadmin: Profile, teacher: Profile, pending_teacher: Profile
    ):
        response = await client.get(
            "/api/v1/profiles",
            params={"is_approved": "false"},
            headers=auth_header(superadmin),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["email"] == "pending@example.com"

    async def test_filter_role_and_search(
        self, client: AsyncClient, superadmin: Profile, sales: Profile, other_sales: Profile, teacher: Profile
    ):
        response = await client.get(
            "/api/v1/profiles",
            params={"role": "sales", "search": "sales2"},
            headers=auth_header(superadmin),
        )
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == str(other_sales.id)

    async def test_non_admin_forbidden(self, client: AsyncClient, head_sales: Profile):
        response = await client.get("/api/v1/profiles", headers=auth_header(head_sales))
        assert response.status_code == 403
        assert response.json()["detail"] == "Not enough permissions"

    async def test_unapproved_superadmin_forbidden(
        self, client: AsyncClient, db: AsyncSession, provider: FakeIdentityProvider
    ):
        admin = await create_profile(db, provider, "new.admin@example.com", Role.SUPERADMIN, is_approved=False)
        response = await client.get("/api/v1/profiles", headers=auth_header(admin))
        assert response.status_code == 403
        assert response.json()["detail"] == "Account pending approval"


class TestUpdateProfile:
    """Tests for approving and editing profiles."""

    async def test_approve(self, client: AsyncClient, superadmin: Profile, pending_teacher: Profile):
        response = await client.patch(
            f"/api/v1/profiles/{pending_teacher.id}",
            json={"is_approved": True},
            headers=auth_header(superadmin),
        )
        assert response.status_code == 200
        assert response.json()["is_approved"] is True

    async def test_approved_actor_gains_access(
        self, client: AsyncClient, superadmin: Profile, pending_teacher: Profile
    ):
        before = await client.get("/api/v1/tariffs", headers=auth_header(pending_teacher))
        assert before.status_code == 403

        await client.patch(
            f"/api/v1/profiles/{pending_teacher.id}",
            json={"is_approved": True},
            headers=auth_header(superadmin),
        )

        after = await client.get("/api/v1/tariffs", headers=auth_header(pending_teacher))
        assert after.status_code == 200

    async def test_change_role_clears_sales_id(self, client: AsyncClient, superadmin: Profile, sales: Profile):
        response = await client.patch(
            f"/api/v1/profiles/{sales.id}",
            json={"role": "teacher"},
            headers=auth_header(superadmin),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "teacher"
        assert data["sales_id"] is None

    async def test_required_fields_cannot_be_cleared(
        self, client: AsyncClient, superadmin: Profile, teacher: Profile
    ):
        for field in ("role", "is_approved"):
            response = await client.patch(
                f"/api/v1/profiles/{teacher.id}",
                json={field: None},
                headers=auth_header(superadmin),
            )
            assert response.status_code == 422

    async def test_cannot_demote_self(self, client: AsyncClient, superadmin: Profile):
        response = await client.patch(
            f"/api/v1/profiles/{superadmin.id}",
            json={"role": "teacher"},
            headers=auth_header(superadmin),
        )
        assert response.status_code == 400

    async def test_cannot_unapprove_self(self, client: AsyncClient, superadmin: Profile):
        response = await client.patch(
            f"/api/v1/profiles/{superadmin.id}",
            json={"is_approved": False},
            headers=auth_header(superadmin),
        )
        assert response.status_code == 400

    async def test_can_rename_self(self, client: AsyncClient, superadmin: Profile):
        response = await client.patch(
            f"/api/v1/profiles/{superadmin.id}",
            json={"full_name": "Head Admin"},
            headers=auth_header(superadmin),
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Head Admin"

    async def test_not_found(self, client: AsyncClient, superadmin: Profile):
        response = await client.patch(
            "/api/v1/profiles/00000000-0000-0000-0000-000000000000",
            json={"is_approved": True},
            headers=auth_header(superadmin),
        )
        assert response.status_code == 404

    async def test_sales_cannot_approve(self, client: AsyncClient, head_sales: Profile, pending_teacher: Profile):
        response = await client.patch(
            f"/api/v1/profiles/{pending_teacher.id}",
            json={"is_approved": True},
            headers=auth_header(head_sales),
        )
        assert response.status_code == 403
