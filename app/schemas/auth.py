"""Request/response schemas for auth endpoints.

Wire format is camelCase (userId, currentPassword, ...). Request fields are
optional at the schema level so missing values reach the service validation
and come back as 400 with a specific message.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for schemas exchanged as camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SignupRequest(CamelModel):
    """New account details."""

    username: str | None = Field(default=None, description="3+ chars, no spaces")
    email: str | None = Field(default=None, description="Email address")
    password: str | None = Field(default=None, description="6+ chars")


class SignupResponse(CamelModel):
    message: str = "Registration successful"
    user_id: int
    username: str
    email: str


class LoginRequest(CamelModel):
    """Credentials for login."""

    email: str | None = Field(default=None, description="Email address (case-insensitive)")
    password: str | None = Field(default=None, description="Password")


class UserPublic(CamelModel):
    """Client-safe projection of a user returned on login (no password hash)."""

    user_id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    email_verified: bool = False


class LoginResponse(CamelModel):
    """Session token returned after successful login."""

    message: str = "Login successful"
    token: str = Field(..., description="Send as Authorization: Bearer <token>")
    user: UserPublic


class UserProfile(CamelModel):
    """Full non-sensitive profile of the authenticated user."""

    user_id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    email_verified: bool
    is_active: bool
    created_at: datetime | None = None


class ProfileResponse(CamelModel):
    user: UserProfile


class UpdateProfileRequest(CamelModel):
    """Profile fields the account owner may change. Omitted fields are left as is."""

    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=32)
    date_of_birth: date | None = None
    gender: str | None = Field(default=None, max_length=32)


class UpdateProfileResponse(CamelModel):
    message: str = "Profile updated successfully"
    user: UserProfile


class ChangePasswordRequest(CamelModel):
    current_password: str | None = None
    new_password: str | None = None


class MessageResponse(CamelModel):
    message: str


class ErrorResponse(BaseModel):
    """Body of every error response."""

    message: str
    code: str
    detail: str | None = None


class CurrentUser(CamelModel):
    """Authenticated principal (from the live user record) for dependency injection."""

    user_id: int
    username: str
    email: str


class AdminUser(CurrentUser):
    """Principal that passed the admin role check."""

    role: str
