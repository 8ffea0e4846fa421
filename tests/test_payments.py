"""Tests for student payments API."""

from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.profile import Profile
from app.models.tariff import Tariff
from tests.conftest import auth_header, create_payment, create_student

PAYMENT = {
    "payment_date": "2026-09-01",
    "payment_type": "card",
    "amount": "500000.00",
    "receipt_url": "/static/receipts/abc.jpg",
}


class TestStudentPayments:
    async def test_record_and_list(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, tariff: Tariff
    ):
        student = await create_student(db, sales, tariff, "AC001")

        response = await client.post(
            f"/api/v1/students/{student.id}/payments", json=PAYMENT, headers=auth_header(sales)
        )
        assert response.status_code == 201
        assert response.json()["student_id"] == str(student.id)

        response = await client.get(
            f"/api/v1/students/{student.id}/payments", headers=auth_header(sales)
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["payment_type"] == "card"

    async def test_cannot_pay_for_other_managers_student(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, other_sales: Profile, tariff: Tariff
    ):
        student = await create_student(db, other_sales, tariff, "AC001")

        response = await client.post(
            f"/api/v1/students/{student.id}/payments", json=PAYMENT, headers=auth_header(sales)
        )
        assert response.status_code == 404

        response = await client.get(
            f"/api/v1/students/{student.id}/payments", headers=auth_header(sales)
        )
        assert response.status_code == 404

    async def test_amount_must_be_positive(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, tariff: Tariff
    ):
        student = await create_student(db, sales, tariff, "AC001")

        response = await client.post(
            f"/api/v1/students/{student.id}/payments",
            json={**PAYMENT, "amount": "0"},
            headers=auth_header(sales),
        )
        assert response.status_code == 422

    async def test_teacher_forbidden(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, teacher: Profile, tariff: Tariff
    ):
        student = await create_student(db, sales, tariff, "AC001")

        response = await client.get(
            f"/api/v1/students/{student.id}/payments", headers=auth_header(teacher)
        )
        assert response.status_code == 403


class TestPayments:
    async def test_list_scoped_to_manager(
        self,
        client: AsyncClient,
        db: AsyncSession,
        sales: Profile,
        other_sales: Profile,
        superadmin: Profile,
        tariff: Tariff,
    ):
        mine = await create_student(db, sales, tariff, "AC001")
        theirs = await create_student(db, other_sales, tariff, "AC002")
        await create_payment(db, mine)
        await create_payment(db, theirs)

        response = await client.get("/api/v1/payments", headers=auth_header(sales))
        assert response.json()["total"] == 1

        response = await client.get("/api/v1/payments", headers=auth_header(superadmin))
        assert response.json()["total"] == 2

    async def test_other_managers_payment_is_not_found(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, other_sales: Profile, tariff: Tariff
    ):
        student = await create_student(db, other_sales, tariff, "AC001")
        payment = await create_payment(db, student)

        response = await client.get(f"/api/v1/payments/{payment.id}", headers=auth_header(sales))
        assert response.status_code == 404

        response = await client.patch(
            f"/api/v1/payments/{payment.id}", json={"amount": "1.00"}, headers=auth_header(sales)
        )
        assert response.status_code == 404

        response = await client.delete(f"/api/v1/payments/{payment.id}", headers=auth_header(sales))
        assert response.status_code == 404

    async def test_update_and_delete_own_payment(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, tariff: Tariff
    ):
        student = await create_student(db, sales, tariff, "AC001")
        payment = await create_payment(db, student)

        response = await client.patch(
            f"/api/v1/payments/{payment.id}",
            json={"amount": "450000.00", "payment_type": "transfer"},
            headers=auth_header(sales),
        )
        assert response.status_code == 200
        assert response.json()["amount"] == "450000.00"
        assert response.json()["payment_type"] == "transfer"

        response = await client.delete(f"/api/v1/payments/{payment.id}", headers=auth_header(sales))
        assert response.status_code == 204

        response = await client.get(f"/api/v1/payments/{payment.id}", headers=auth_header(sales))
        assert response.status_code == 404

    async def test_required_fields_cannot_be_cleared(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, tariff: Tariff
    ):
        student = await create_student(db, sales, tariff, "AC001")
        payment = await create_payment(db, student)

        for field in ("payment_date", "payment_type", "amount", "receipt_url"):
            response = await client.patch(
                f"/api/v1/payments/{payment.id}",
                json={field: None},
                headers=auth_header(sales),
            )
            assert response.status_code == 422

    async def test_payments_deleted_with_student(
        self, client: AsyncClient, db: AsyncSession, sales: Profile, tariff: Tariff
    ):
        student = await create_student(db, sales, tariff, "AC001")
        payment = await create_payment(db, student)

        await client.delete(f"/api/v1/students/{student.id}", headers=auth_header(sales))

        response = await client.get(f"/api/v1/payments/{payment.id}", headers=auth_header(sales))
        assert response.status_code == 404


class TestReceiptUpload:
    @pytest.fixture(autouse=True)
    def upload_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "receipts"))
        return tmp_path / "receipts"

    async def test_upload_image(self, client: AsyncClient, sales: Profile, upload_dir: Path):
        response = await client.post(
            "/api/v1/uploads/receipt",
            files={"file": ("receipt.png", b"\x89PNG fake", "image/png")},
            headers=auth_header(sales),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["filename"].endswith(".png")
        assert data["url"].endswith(f"/{sales.id}/{data['filename']}")
        assert (upload_dir / str(sales.id) / data["filename"]).read_bytes() == b"\x89PNG fake"

    async def test_rejects_other_types(self, client: AsyncClient, sales: Profile):
        response = await client.post(
            "/api/v1/uploads/receipt",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_header(sales),
        )
        assert response.status_code == 400

    async def test_rejects_large_files(
        self, client: AsyncClient, sales: Profile, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 4)
        response = await client.post(
            "/api/v1/uploads/receipt",
            files={"file": ("receipt.pdf", b"%PDF-1.7", "application/pdf")},
            headers=auth_header(sales),
        )
        assert response.status_code == 400

    async def test_teacher_cannot_upload(self, client: AsyncClient, teacher: Profile):
        response = await client.post(
            "/api/v1/uploads/receipt",
            files={"file": ("receipt.png", b"x", "image/png")},
            headers=auth_header(teacher),
        )
        assert response.status_code == 403
