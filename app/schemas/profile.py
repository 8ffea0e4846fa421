"""Profile schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.permissions import Role
from app.schemas.validators import reject_null


class ProfileUpdate(BaseModel):
    """Schema for a superadmin editing a profile."""

    full_name: str | None = Field(None, min_length=1, max_length=200)
    role: Role | None = None
    is_approved: bool | None = None
    sales_id: str | None = Field(None, max_length=50)

    @field_validator("role", "is_approved")
    @classmethod
    def required_fields_not_null(cls, value):
        return reject_null(value)


class ProfileResponse(BaseModel):
    """Profile response schema. Also the snapshot held by the session cache."""

    id: UUID
    email: str
    full_name: str | None
    role: Role
    is_approved: bool
    sales_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True, "frozen": True}


class ProfileListResponse(BaseModel):
    """Paginated list of profiles."""

    items: list[ProfileResponse]
    total: int
    skip: int
    limit: int
