"""
Authentication use cases and the request-time access-control gate.

AuthService composes the credential store, the password hasher and the token
service. It is constructed per request by the API dependencies, so tests can
hand it a SQLite-backed repository and a cheap hasher.
"""

import logging
import re

from app.core.errors import (
    AccountDeactivatedError,
    AuthenticationError,
    CurrentPasswordIncorrectError,
    EmailTakenError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    UpdateFailedError,
    UsernameTakenError,
    UserNotFoundError,
    ValidationError,
)
from app.core.security import (
    EMAIL_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    PasswordHasher,
    TokenService,
)
from app.models import ROLE_ADMIN, User
from app.repositories.users import DuplicateKeyError, UserRepository
from app.schemas.auth import (
    AdminUser,
    CurrentUser,
    LoginResponse,
    SignupResponse,
    UpdateProfileRequest,
    UserPublic,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
WHITESPACE_PATTERN = re.compile(r"\s")


def validate_signup_fields(
    username: str | None,
    email: str | None,
    password: str | None,
) -> tuple[str, str]:
    """
    Reject malformed signup input before the store is touched.

    Returns the lowercased (username, email) pair. Limits apply to these
    stored forms, since lowercasing can lengthen some Unicode text.
    """
    if not username or not email or not password:
        raise ValidationError("Username, email, and password are required")
    username = username.lower()
    email = email.lower()
    if len(email) > EMAIL_MAX_LEN or not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError("Please provide a valid email address", code="INVALID_EMAIL")
    _validate_new_password(password, "Password")
    if len(username) < USERNAME_MIN_LEN:
        raise ValidationError(
            f"Username must be at least {USERNAME_MIN_LEN} characters long",
            code="INVALID_USERNAME",
        )
    if len(username) > USERNAME_MAX_LEN:
        raise ValidationError(
            f"Username must be at most {USERNAME_MAX_LEN} characters long",
            code="INVALID_USERNAME",
        )
    if WHITESPACE_PATTERN.search(username):
        raise ValidationError("Username cannot contain spaces", code="INVALID_USERNAME")
    return username, email


def _validate_new_password(password: str, label: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(
            f"{label} must be at least {PASSWORD_MIN_LEN} characters long",
            code="INVALID_PASSWORD",
        )
    if len(password) > PASSWORD_MAX_LEN:
        raise ValidationError(
            f"{label} must be at most {PASSWORD_MAX_LEN} characters long",
            code="INVALID_PASSWORD",
        )


class AuthService:
    """Signup, login, password change and profile use cases plus the access gate."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    def signup(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
    ) -> SignupResponse:
        """Create an account with the default role and flags."""
        username, email = validate_signup_fields(username, email, password)

        if self.users.find_by_username(username) is not None:
            raise UsernameTakenError()
        if self.users.find_by_email(email) is not None:
            raise EmailTakenError()

        password_hash = self.hasher.hash(password)
        try:
            user = self.users.create(username=username, email=email, password_hash=password_hash)
        except DuplicateKeyError as e:
            # A concurrent signup won the race; report which identifier it took.
            logger.info("Signup lost unique-index race", extra={"username": username})
            if self.users.find_by_username(username) is not None:
                raise UsernameTakenError() from e
            raise EmailTakenError() from e

        logger.info("User signed up", extra={"user_id": user.user_id})
        return SignupResponse(user_id=user.user_id, username=user.username, email=user.email)

    def login(self, email: str | None, password: str | None) -> LoginResponse:
        """
        Exchange email and password for a session token.

        Unknown email and wrong password share InvalidCredentialsError and
        both pay for one bcrypt verification. A
        deactivated account is reported as such, before the password check.
        There is no lockout: failures never change account state.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.users.find_by_email(email.lower())
        if user is None:
            self.hasher.verify_dummy(password)
            logger.info("Login failed", extra={"reason": "unknown_email"})
            raise InvalidCredentialsError()
        if not user.is_active:
            logger.info("Login refused", extra={"user_id": user.user_id, "reason": "deactivated"})
            raise AccountDeactivatedError()
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Login failed", extra={"user_id": user.user_id, "reason": "bad_password"})
            raise InvalidCredentialsError()

        token = self.tokens.issue_session_token(user.user_id, user.username, user.email)
        logger.info("Login succeeded", extra={"user_id": user.user_id})
        return LoginResponse(token=token, user=UserPublic.model_validate(user))

    def change_password(
        self,
        user_id: int,
        current_password: str | None,
        new_password: str | None,
    ) -> None:
        """Replace the password after checking the current one."""
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")

        current_hash = self.users.get_user_password(user_id)
        if current_hash is None:
            raise UserNotFoundError()
        if not self.hasher.verify(current_password, current_hash):
            logger.info("Password change refused", extra={"user_id": user_id})
            raise CurrentPasswordIncorrectError()
        _validate_new_password(new_password, "New password")

        if not self.users.update_password(user_id, self.hasher.hash(new_password)):
            raise UpdateFailedError()
        logger.info("Password changed", extra={"user_id": user_id})

    def get_profile(self, user_id: int) -> User:
        user = self.users.get_profile(user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    def update_profile(self, user_id: int, body: UpdateProfileRequest) -> User:
        fields = body.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError("No profile fields provided")
        if not self.users.update_profile(user_id, fields):
            raise UserNotFoundError()
        logger.info("Profile updated", extra={"user_id": user_id, "fields": sorted(fields)})
        return self.get_profile(user_id)

    def authenticate(self, token: str | None) -> CurrentUser:
        """
        Gate for protected routes: verify the bearer token, then re-read the
        live user so a deactivated account is refused even with a valid token.

        token is None when the request carried no usable Bearer credential.
        """
        if not token:
            raise AuthenticationError("Access token is required", code="TOKEN_REQUIRED")
        claims = self.tokens.verify(token)
        user = self.users.find_by_id(claims.user_id)
        if user is None:
            raise InvalidTokenError("Invalid token - user not found", code="USER_NOT_FOUND")
        if not user.is_active:
            raise AccountDeactivatedError("Account is deactivated")
        return CurrentUser(user_id=user.user_id, username=user.username, email=user.email)

    def authorize_admin(self, principal: CurrentUser) -> AdminUser:
        """Admin gate, layered on authenticate(): re-reads the role from the store."""
        user = self.users.find_by_id(principal.user_id)
        if user is None:
            raise InvalidTokenError("User not found", code="USER_NOT_FOUND")
        if user.role != ROLE_ADMIN:
            logger.info("Admin access denied", extra={"user_id": user.user_id})
            raise ForbiddenError()
        return AdminUser(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            role=user.role,
        )
