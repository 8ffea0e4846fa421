"""Authentication schemas."""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.core.permissions import SELF_REGISTERABLE_ROLES, Role
from app.schemas.validators import Email


class LoginRequest(BaseModel):
    """Login request schema."""

    email: Email
    password: str = Field(..., min_length=6)


class RegisterRequest(BaseModel):
    """Self-registration. The new profile waits for approval."""

    email: Email
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=200)
    role: Role = Role.TEACHER
    sales_id: str | None = Field(None, max_length=50)

    @field_validator("role")
    @classmethod
    def role_is_self_registerable(cls, value: Role) -> Role:
        if value not in SELF_REGISTERABLE_ROLES:
            raise ValueError("This role cannot be chosen at registration")
        return value


class DeleteUserRequest(BaseModel):
    """Admin request to delete a user (identity and profile)."""

    user_id: UUID | None = Field(None, alias="userId")

    model_config = {"populate_by_name": True}


class DeleteUserResponse(BaseModel):
    """Result of an admin user deletion."""

    success: bool = True
    message: str = "User deleted successfully"
