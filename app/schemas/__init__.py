"""Pydantic request/response schemas."""

from app.schemas.admin import (
    UpdateRoleRequest,
    UpdateStatusRequest,
    UserListItem,
    UsersListResponse,
)
from app.schemas.auth import (
    AdminUser,
    ChangePasswordRequest,
    CurrentUser,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    SignupRequest,
    SignupResponse,
    UpdateProfileRequest,
    UpdateProfileResponse,
    UserProfile,
    UserPublic,
)
from app.schemas.health import HealthResponse

__all__ = [
    "AdminUser",
    "ChangePasswordRequest",
    "CurrentUser",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "ProfileResponse",
    "SignupRequest",
    "SignupResponse",
    "UpdateProfileRequest",
    "UpdateProfileResponse",
    "UpdateRoleRequest",
    "UpdateStatusRequest",
    "UserListItem",
    "UserProfile",
    "UserPublic",
    "UsersListResponse",
]
