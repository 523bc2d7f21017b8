"""Admin-only user management. Every route sits behind require_admin."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_user_admin_service, require_admin
from app.schemas.admin import (
    UpdateRoleRequest,
    UpdateStatusRequest,
    UserListItem,
    UsersListResponse,
)
from app.schemas.auth import AdminUser, MessageResponse
from app.services.users import UserAdminService

router = APIRouter()

AdminDep = Annotated[AdminUser, Depends(require_admin)]
ServiceDep = Annotated[UserAdminService, Depends(get_user_admin_service)]


@router.get("/users", response_model=UsersListResponse)
def list_users(_admin: AdminDep, service: ServiceDep) -> UsersListResponse:
    """List all users, newest first."""
    users = service.list_users()
    return UsersListResponse(users=[UserListItem.model_validate(u) for u in users])


@router.put("/users/{user_id}/status", response_model=MessageResponse)
def update_user_status(
    user_id: int,
    body: UpdateStatusRequest,
    admin: AdminDep,
    service: ServiceDep,
) -> MessageResponse:
    """Activate or deactivate an account. Deactivation invalidates its tokens at the gate."""
    service.set_active(admin, user_id, body.is_active)
    return MessageResponse(message="User status updated successfully")


@router.put("/users/{user_id}/role", response_model=MessageResponse)
def update_user_role(
    user_id: int,
    body: UpdateRoleRequest,
    admin: AdminDep,
    service: ServiceDep,
) -> MessageResponse:
    service.set_role(admin, user_id, body.role)
    return MessageResponse(message="User role updated successfully")


@router.post("/users/{user_id}/verify-email", response_model=MessageResponse)
def verify_user_email(user_id: int, admin: AdminDep, service: ServiceDep) -> MessageResponse:
    service.verify_email(admin, user_id)
    return MessageResponse(message="Email verified successfully")


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, admin: AdminDep, service: ServiceDep) -> MessageResponse:
    service.delete_user(admin, user_id)
    return MessageResponse(message="User deleted successfully")
