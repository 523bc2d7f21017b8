"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.user import ROLE_ADMIN, ROLE_CUSTOMER, ROLES, User

__all__ = ["Base", "ROLE_ADMIN", "ROLE_CUSTOMER", "ROLES", "User"]
