"""Student schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.validators import PhoneNumber, StudentCode, reject_null


class StudentCreate(BaseModel):
    """
    Schema for creating a new student.

    `manager_id` defaults to the acting sales manager; only a superadmin
    may assign another manager. `student_code` is generated when omitted.
    """

    manager_id: UUID | None = None
    student_code: StudentCode | None = None
    full_name: str = Field(..., min_length=1, max_length=200)
    phone: PhoneNumber
    tariff_id: UUID
    tariff_price_id: UUID
    group_code: str = Field(..., min_length=1, max_length=50)
    notes: str | None = None


class StudentUpdate(BaseModel):
    """Schema for updating a student."""

    manager_id: UUID | None = None
    full_name: str | None = Field(None, min_length=1, max_length=200)
    phone: PhoneNumber | None = None
    tariff_id: UUID | None = None
    tariff_price_id: UUID | None = None
    group_code: str | None = Field(None, min_length=1, max_length=50)
    notes: str | None = None

    @field_validator("manager_id", "full_name", "phone", "tariff_id", "tariff_price_id", "group_code")
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)


class TariffInfo(BaseModel):
    """Nested tariff info for student response."""

    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class TariffPriceInfo(BaseModel):
    """Nested tariff price info for student response."""

    id: UUID
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class StudentResponse(BaseModel):
    """Student response schema."""

    id: UUID
    manager_id: UUID
    student_code: str
    full_name: str
    phone: str
    tariff_id: UUID
    tariff_price_id: UUID
    group_code: str
    notes: str | None
    tariff: TariffInfo | None = None
    tariff_price: TariffPriceInfo | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudentListResponse(BaseModel):
    """Paginated list of students."""

    items: list[StudentResponse]
    total: int
    skip: int
    limit: int
