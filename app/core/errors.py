"""
Error taxonomy for the auth subsystem.

Every failure a service can report carries an ErrorKind; the HTTP layer maps
the kind to a status code in exactly one place (STATUS_BY_KIND) and never
inspects message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failure; decides the HTTP status at the boundary."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    """Base class for expected domain failures with a stable machine-readable code."""

    kind: ErrorKind = ErrorKind.INTERNAL
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class CurrentPasswordIncorrectError(ValidationError):
    code = "CURRENT_PASSWORD_INCORRECT"
    default_message = "Current password is incorrect"


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


class UsernameTakenError(ConflictError):
    code = "USERNAME_TAKEN"
    default_message = "Username already exists"


class EmailTakenError(ConflictError):
    code = "EMAIL_TAKEN"
    default_message = "Email already in use"


class AuthenticationError(AppError):
    kind = ErrorKind.AUTHENTICATION
    code = "AUTHENTICATION_FAILED"
    default_message = "Authentication failed"


class InvalidCredentialsError(AuthenticationError):
    # Same message for unknown email and wrong password.
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class InvalidTokenError(AuthenticationError):
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenExpiredError(AuthenticationError):
    code = "TOKEN_EXPIRED"
    default_message = "Token expired"


class AuthorizationError(AppError):
    kind = ErrorKind.AUTHORIZATION
    code = "FORBIDDEN"
    default_message = "Access denied"


class AccountDeactivatedError(AuthorizationError):
    code = "ACCOUNT_DEACTIVATED"
    default_message = "Account is deactivated. Please contact support."


class ForbiddenError(AuthorizationError):
    code = "ADMIN_REQUIRED"
    default_message = "Access denied. Admin privileges required."


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Not found"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    default_message = "User not found"


class InternalError(AppError):
    kind = ErrorKind.INTERNAL
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"


class UpdateFailedError(InternalError):
    code = "UPDATE_FAILED"
    default_message = "Failed to update password"


class PasswordHashError(InternalError):
    code = "PASSWORD_HASH_ERROR"
    default_message = "Stored password hash is unreadable"
