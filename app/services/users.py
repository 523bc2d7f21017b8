"""Admin user management: listing accounts and changing status, role and verification."""

import logging

from app.core.errors import UserNotFoundError, ValidationError
from app.models import ROLES, User
from app.repositories.users import UserRepository
from app.schemas.auth import AdminUser

logger = logging.getLogger(__name__)


class UserAdminService:
    """Operations reserved for principals that passed the admin gate."""

    def __init__(self, users: UserRepository) -> None:
        self.users = users

    def list_users(self) -> list[User]:
        return self.users.list_users()

    def set_active(self, admin: AdminUser, user_id: int, is_active: bool | None) -> None:
        if is_active is None:
            raise ValidationError("isActive is required")
        if not is_active:
            self._refuse_self(admin, user_id, "deactivate")
        self._require(self.users.update_status(user_id, is_active))
        logger.info(
            "User status changed",
            extra={"admin_id": admin.user_id, "user_id": user_id, "is_active": is_active},
        )

    def set_role(self, admin: AdminUser, user_id: int, role: str | None) -> None:
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}", code="INVALID_ROLE")
        if role != admin.role:
            self._refuse_self(admin, user_id, "change the role of")
        self._require(self.users.update_role(user_id, role))
        logger.info(
            "User role changed",
            extra={"admin_id": admin.user_id, "user_id": user_id, "role": role},
        )

    def verify_email(self, admin: AdminUser, user_id: int) -> None:
        self._require(self.users.verify_email(user_id))
        logger.info("User email verified", extra={"admin_id": admin.user_id, "user_id": user_id})

    def delete_user(self, admin: AdminUser, user_id: int) -> None:
        self._refuse_self(admin, user_id, "delete")
        self._require(self.users.delete_user(user_id))
        logger.info("User deleted", extra={"admin_id": admin.user_id, "user_id": user_id})

    @staticmethod
    def _refuse_self(admin: AdminUser, user_id: int, action: str) -> None:
        if admin.user_id == user_id:
            raise ValidationError(f"Admins cannot {action} their own account", code="SELF_MODIFICATION")

    @staticmethod
    def _require(affected: bool) -> None:
        if not affected:
            raise UserNotFoundError()
