"""Password hashing and JWT issuance/verification for authentication."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.errors import InvalidTokenError, PasswordHashError, TokenExpiredError

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12
# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

# Input validation limits for signup and password change.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
EMAIL_MAX_LEN = 255
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

SESSION_TOKEN_TTL = timedelta(hours=24)
LONG_LIVED_TOKEN_TTL = timedelta(days=30)


class PasswordHasher:
    """Salted one-way hashing of passwords with a fixed bcrypt work factor."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        self.rounds = rounds
        self._dummy_hash: str | None = None

    def hash(self, plain_password: str) -> str:
        """Hash a plain-text password for storage. Each call uses a fresh salt."""
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain_password: str, hashed: str) -> bool:
        """
        Verify a plain password against a stored hash.

        Returns False on mismatch. A stored hash bcrypt cannot parse is a data
        problem, not a bad login, so it raises PasswordHashError.
        """
        pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError) as e:
            raise PasswordHashError() from e

    def verify_dummy(self, plain_password: str) -> bool:
        """
        Spend one verification's worth of work against a throwaway hash.

        Used when there is no stored hash to check (unknown email) so that
        branch costs about as much as a wrong password. Always returns False.
        """
        if self._dummy_hash is None:
            self._dummy_hash = self.hash("not-a-real-password")
        self.verify(plain_password, self._dummy_hash)
        return False


class TokenKind(str, Enum):
    """Token classes with distinct lifetimes and claim shapes."""

    SESSION = "session"
    LONG_LIVED = "long_lived"


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims recovered from a verified token."""

    user_id: int
    kind: TokenKind
    issued_at: datetime
    expires_at: datetime
    username: str | None = None
    email: str | None = None


class TokenService:
    """Signs and verifies stateless bearer tokens with a process-wide HMAC secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        session_ttl: timedelta = SESSION_TOKEN_TTL,
        long_lived_ttl: timedelta = LONG_LIVED_TOKEN_TTL,
    ) -> None:
        self._secret = secret
        self.algorithm = algorithm
        self.session_ttl = session_ttl
        self.long_lived_ttl = long_lived_ttl

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            session_ttl=timedelta(hours=settings.SESSION_TOKEN_EXPIRE_HOURS),
            long_lived_ttl=timedelta(days=settings.LONG_LIVED_TOKEN_EXPIRE_DAYS),
        )

    def issue(self, claims: dict[str, Any], ttl: timedelta, kind: TokenKind) -> str:
        """Sign claims together with kind, iat and exp = now + ttl."""
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            **claims,
            "kind": kind.value,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def issue_session_token(self, user_id: int, username: str, email: str) -> str:
        """Login token: carries the identity snapshot taken at issuance."""
        return self.issue(
            {"sub": str(user_id), "username": username, "email": email},
            self.session_ttl,
            TokenKind.SESSION,
        )

    def issue_long_lived_token(self, user_id: int) -> str:
        """Automation token: user id only, longer TTL."""
        return self.issue({"sub": str(user_id)}, self.long_lived_ttl, TokenKind.LONG_LIVED)

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature and expiry and return the embedded claims.

        Raises TokenExpiredError once exp has passed and InvalidTokenError for
        any other signature or payload problem. There is no revocation list.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e

        try:
            user_id = int(payload["sub"])
            kind = TokenKind(payload.get("kind"))
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("Invalid token payload") from e

        return TokenClaims(
            user_id=user_id,
            kind=kind,
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            username=payload.get("username"),
            email=payload.get("email"),
        )
