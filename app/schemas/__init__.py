"""Pydantic schemas."""

from app.schemas.auth import (
    DeleteUserRequest,
    DeleteUserResponse,
    LoginRequest,
    RegisterRequest,
)
from app.schemas.profile import (
    ProfileListResponse,
    ProfileResponse,
    ProfileUpdate,
)

__all__ = [
    # Auth
    "DeleteUserRequest",
    "DeleteUserResponse",
    "LoginRequest",
    "RegisterRequest",
    # Profile
    "ProfileListResponse",
    "ProfileResponse",
    "ProfileUpdate",
]
