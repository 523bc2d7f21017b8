"""Schemas for admin user-management endpoints."""

from datetime import datetime

from pydantic import Field

from app.schemas.auth import CamelModel


class UserListItem(CamelModel):
    """User entry for admin list (no password)."""

    user_id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    is_active: bool
    email_verified: bool
    created_at: datetime | None = None


class UsersListResponse(CamelModel):
    """Response for GET /admin/users."""

    users: list[UserListItem]


class UpdateStatusRequest(CamelModel):
    is_active: bool | None = Field(default=None, description="false deactivates the account")


class UpdateRoleRequest(CamelModel):
    role: str | None = Field(default=None, description="'admin' or 'customer'")
