"""
Credential store: persistence of user records through a SQLAlchemy session.

Lookups return None when nothing matches and mutations return whether a row
was affected. Only create() raises for an expected outcome (DuplicateKeyError
on a unique-index violation); connectivity problems propagate as SQLAlchemy
exceptions.
"""

from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User

# Columns a user may change through profile update.
PROFILE_FIELDS = ("first_name", "last_name", "phone", "date_of_birth", "gender")


class DuplicateKeyError(Exception):
    """Raised when an insert collides with the username or email unique index."""


class UserRepository:
    """Data access for the users table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_id(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def find_by_username(self, username: str) -> User | None:
        return self.session.query(User).filter(User.username == username).first()

    def find_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter(User.email == email).first()

    def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: str | None = None,
    ) -> User:
        """Insert a user with default flags; raise DuplicateKeyError on a unique violation."""
        user = User(username=username, email=email, password_hash=password_hash)
        if role is not None:
            user.role = role
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateKeyError(str(e.orig)) from e
        self.session.refresh(user)
        return user

    def get_user_password(self, user_id: int) -> str | None:
        row = (
            self.session.query(User.password_hash)
            .filter(User.user_id == user_id)
            .first()
        )
        return row.password_hash if row else None

    def get_profile(self, user_id: int) -> User | None:
        return self.find_by_id(user_id)

    def list_users(self) -> list[User]:
        return (
            self.session.query(User)
            .order_by(User.created_at.desc(), User.user_id.desc())
            .all()
        )

    def update_password(self, user_id: int, password_hash: str) -> bool:
        return self._update(user_id, {User.password_hash: password_hash})

    def update_profile(self, user_id: int, fields: dict[str, Any]) -> bool:
        """Update the given profile columns; unknown keys are ignored."""
        values = {
            getattr(User, name): value
            for name, value in fields.items()
            if name in PROFILE_FIELDS
        }
        return self._update(user_id, values)

    def update_status(self, user_id: int, is_active: bool) -> bool:
        return self._update(user_id, {User.is_active: is_active})

    def update_role(self, user_id: int, role: str) -> bool:
        return self._update(user_id, {User.role: role})

    def verify_email(self, user_id: int) -> bool:
        return self._update(user_id, {User.email_verified: True})

    def delete_user(self, user_id: int) -> bool:
        deleted = (
            self.session.query(User)
            .filter(User.user_id == user_id)
            .delete()
        )
        self.session.commit()
        return deleted > 0

    def _update(self, user_id: int, values: dict[Any, Any]) -> bool:
        values[User.updated_at] = func.now()
        updated = (
            self.session.query(User)
            .filter(User.user_id == user_id)
            .update(values, synchronize_session=False)
        )
        self.session.commit()
        return updated > 0
