"""ORM model for back-office user accounts (auth and RBAC)."""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, false, func, true

from app.models.base import Base

ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
ROLES = (ROLE_ADMIN, ROLE_CUSTOMER)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    username and email are stored lowercase; their unique indexes are what
    actually prevents duplicate accounts under concurrent signups.
    """

    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_CUSTOMER, server_default=ROLE_CUSTOMER)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(32), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(32), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    email_verified = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User user_id={self.user_id} username={self.username!r} role={self.role!r}>"
