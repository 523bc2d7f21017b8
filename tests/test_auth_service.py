"""Unit tests for app.services.auth.AuthService against an in-memory store."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock

from app.core.errors import (
    AccountDeactivatedError,
    AuthenticationError,
    CurrentPasswordIncorrectError,
    EmailTakenError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    UpdateFailedError,
    UsernameTakenError,
    UserNotFoundError,
    ValidationError,
)
from app.core.security import TokenKind
from app.models import ROLE_ADMIN, ROLE_CUSTOMER, User
from app.repositories.users import DuplicateKeyError, UserRepository
from app.schemas.auth import CurrentUser, UpdateProfileRequest
from app.services.auth import AuthService, validate_signup_fields
from tests.support import create_user, hasher, make_session_factory, tokens


class AuthServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session = make_session_factory()()
        self.users = UserRepository(self.session)
        self.service = AuthService(self.users, hasher, tokens)

    def tearDown(self) -> None:
        self.session.close()


class TestSignup(AuthServiceTestCase):
    def test_persists_lowercase_identity_with_defaults(self) -> None:
        result = self.service.signup("Alice", "Alice@Example.COM", "secret1")
        self.assertEqual(result.username, "alice")
        self.assertEqual(result.email, "alice@example.com")

        user = self.users.find_by_id(result.user_id)
        self.assertEqual(user.username, "alice")
        self.assertEqual(user.email, "alice@example.com")
        self.assertEqual(user.role, ROLE_CUSTOMER)
        self.assertTrue(user.is_active)
        self.assertFalse(user.email_verified)
        self.assertNotEqual(user.password_hash, "secret1")
        self.assertTrue(hasher.verify("secret1", user.password_hash))

    def test_rejects_invalid_input(self) -> None:
        cases = [
            (None, "a@example.com", "secret1", "VALIDATION_ERROR"),
            ("alice", "", "secret1", "VALIDATION_ERROR"),
            ("alice", "a@example.com", None, "VALIDATION_ERROR"),
            ("alice", "not-an-email", "secret1", "INVALID_EMAIL"),
            ("alice", "a@example", "secret1", "INVALID_EMAIL"),
            ("alice", "a b@example.com", "secret1", "INVALID_EMAIL"),
            ("alice", "a@example.com", "12345", "INVALID_PASSWORD"),
            ("al", "a@example.com", "secret1", "INVALID_USERNAME"),
            ("al ice", "a@example.com", "secret1", "INVALID_USERNAME"),
            ("al\tice", "a@example.com", "secret1", "INVALID_USERNAME"),
            ("a" * 51, "a@example.com", "secret1", "INVALID_USERNAME"),
            ("alice", "alice@example.com\n", "secret1", "INVALID_EMAIL"),
            ("\u0130" * 50, "a@example.com", "secret1", "INVALID_USERNAME"),
            ("alice", "\u0130" * 126 + "@example.com", "secret1", "INVALID_EMAIL"),
        ]
        for username, email, password, code in cases:
            with self.subTest(username=username, email=email, password=password):
                with self.assertRaises(ValidationError) as ctx:
                    self.service.signup(username, email, password)
                self.assertEqual(ctx.exception.code, code)
                self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self.session.query(User).count(), 0)

    def test_duplicate_username_any_case(self) -> None:
        self.service.signup("alice", "alice@example.com", "secret1")
        with self.assertRaises(UsernameTakenError) as ctx:
            self.service.signup("ALICE", "other@example.com", "secret1")
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(self.session.query(User).count(), 1)

    def test_duplicate_email_any_case(self) -> None:
        self.service.signup("alice", "alice@example.com", "secret1")
        with self.assertRaises(EmailTakenError) as ctx:
            self.service.signup("alice2", "ALICE@example.com", "secret1")
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(self.session.query(User).count(), 1)

    def test_username_checked_before_email(self) -> None:
        self.service.signup("alice", "alice@example.com", "secret1")
        with self.assertRaises(UsernameTakenError):
            self.service.signup("alice", "alice@example.com", "secret1")

    def test_trailing_newline_does_not_create_a_second_account(self) -> None:
        self.service.signup("alice", "alice@example.com", "secret1")
        with self.assertRaises(ValidationError):
            self.service.signup("alice2", "alice@example.com\n", "secret1")
        self.assertEqual(self.session.query(User).count(), 1)

    def test_limits_apply_to_the_stored_lowercase_form(self) -> None:
        self.assertEqual(
            validate_signup_fields("Alice", "Alice@Example.COM", "secret1"),
            ("alice", "alice@example.com"),
        )
        with self.assertRaises(ValidationError) as ctx:
            validate_signup_fields("\u0130" * 50, "a@example.com", "secret1")
        self.assertEqual(ctx.exception.code, "INVALID_USERNAME")


class TestSignupRace(unittest.TestCase):
    """A unique-index violation from the store becomes a conflict, not a crash."""

    def _service(self, users: MagicMock) -> AuthService:
        return AuthService(users, hasher, tokens)

    def test_lost_race_on_username(self) -> None:
        users = MagicMock()
        users.find_by_username.side_effect = [None, MagicMock(spec=User)]
        users.find_by_email.return_value = None
        users.create.side_effect = DuplicateKeyError("duplicate key")
        with self.assertRaises(UsernameTakenError):
            self._service(users).signup("alice", "alice@example.com", "secret1")

    def test_lost_race_on_email(self) -> None:
        users = MagicMock()
        users.find_by_username.return_value = None
        users.find_by_email.return_value = None
        users.create.side_effect = DuplicateKeyError("duplicate key")
        with self.assertRaises(EmailTakenError):
            self._service(users).signup("alice", "alice@example.com", "secret1")

    def test_store_level_unique_index(self) -> None:
        session = make_session_factory()()
        try:
            users = UserRepository(session)
            users.create(username="alice", email="alice@example.com", password_hash="x")
            with self.assertRaises(DuplicateKeyError):
                users.create(username="alice", email="new@example.com", password_hash="x")
            with self.assertRaises(DuplicateKeyError):
                users.create(username="new", email="alice@example.com", password_hash="x")
            self.assertEqual(session.query(User).count(), 1)
        finally:
            session.close()


class TestLogin(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = create_user(self.session, "alice", "alice@example.com", "secret1")

    def test_success_issues_session_token(self) -> None:
        result = self.service.login("ALICE@example.com", "secret1")
        claims = tokens.verify(result.token)
        self.assertEqual(claims.user_id, self.user.user_id)
        self.assertEqual(claims.username, "alice")
        self.assertEqual(claims.email, "alice@example.com")
        self.assertIs(claims.kind, TokenKind.SESSION)
        self.assertEqual(result.user.user_id, self.user.user_id)
        self.assertNotIn("password_hash", result.user.model_dump())

    def test_unknown_email_and_wrong_password_look_the_same(self) -> None:
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self.service.login("nobody@example.com", "secret1")
        with self.assertRaises(InvalidCredentialsError) as wrong:
            self.service.login("alice@example.com", "wrong")
        self.assertEqual(unknown.exception.message, wrong.exception.message)
        self.assertEqual(unknown.exception.status_code, 401)

    def test_deactivated_account_is_reported_even_with_correct_password(self) -> None:
        self.users.update_status(self.user.user_id, False)
        with self.assertRaises(AccountDeactivatedError) as ctx:
            self.service.login("alice@example.com", "secret1")
        self.assertEqual(ctx.exception.status_code, 403)

    def test_missing_fields(self) -> None:
        for email, password in ((None, "secret1"), ("alice@example.com", ""), (None, None)):
            with self.subTest(email=email, password=password):
                with self.assertRaises(ValidationError):
                    self.service.login(email, password)

    def test_repeated_failures_do_not_lock_account(self) -> None:
        for _ in range(5):
            with self.assertRaises(InvalidCredentialsError):
                self.service.login("alice@example.com", "wrong")
        self.assertTrue(self.users.find_by_id(self.user.user_id).is_active)
        self.assertTrue(self.service.login("alice@example.com", "secret1").token)

    def test_unknown_email_still_runs_a_hash_check(self) -> None:
        users = MagicMock()
        users.find_by_email.return_value = None
        mock_hasher = MagicMock()
        with self.assertRaises(InvalidCredentialsError):
            AuthService(users, mock_hasher, tokens).login("nobody@example.com", "secret1")
        mock_hasher.verify_dummy.assert_called_once_with("secret1")


class TestChangePassword(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = create_user(self.session, "alice", "alice@example.com", "secret1")

    def test_success_persists_new_verifiable_hash(self) -> None:
        self.service.change_password(self.user.user_id, "secret1", "newsecret")
        stored = self.users.get_user_password(self.user.user_id)
        self.assertTrue(hasher.verify("newsecret", stored))
        self.assertFalse(hasher.verify("secret1", stored))

    def test_wrong_current_password_wins_over_invalid_new_password(self) -> None:
        for new_password in ("newsecret", "x"):
            with self.subTest(new_password=new_password):
                with self.assertRaises(CurrentPasswordIncorrectError) as ctx:
                    self.service.change_password(self.user.user_id, "wrong", new_password)
                self.assertEqual(ctx.exception.status_code, 400)
        self.assertTrue(hasher.verify("secret1", self.users.get_user_password(self.user.user_id)))

    def test_new_password_too_short(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.change_password(self.user.user_id, "secret1", "short")
        self.assertEqual(ctx.exception.code, "INVALID_PASSWORD")

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            self.service.change_password(999, "secret1", "newsecret")

    def test_zero_rows_updated(self) -> None:
        users = MagicMock()
        users.get_user_password.return_value = hasher.hash("secret1")
        users.update_password.return_value = False
        with self.assertRaises(UpdateFailedError) as ctx:
            AuthService(users, hasher, tokens).change_password(1, "secret1", "newsecret")
        self.assertEqual(ctx.exception.status_code, 500)


class TestProfile(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = create_user(self.session, "alice", "alice@example.com", "secret1")

    def test_update_only_given_fields(self) -> None:
        self.users.update_profile(self.user.user_id, {"last_name": "Liddell"})
        body = UpdateProfileRequest(first_name="Alice", phone="555-0100")
        user = self.service.update_profile(self.user.user_id, body)
        self.assertEqual(user.first_name, "Alice")
        self.assertEqual(user.phone, "555-0100")
        self.assertEqual(user.last_name, "Liddell")

    def test_update_requires_a_field(self) -> None:
        with self.assertRaises(ValidationError):
            self.service.update_profile(self.user.user_id, UpdateProfileRequest())

    def test_unknown_user(self) -> None:
        with self.assertRaises(UserNotFoundError):
            self.service.get_profile(999)
        with self.assertRaises(UserNotFoundError):
            self.service.update_profile(999, UpdateProfileRequest(first_name="X"))


class TestGate(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = create_user(self.session, "alice", "alice@example.com", "secret1")
        self.token = tokens.issue_session_token(self.user.user_id, "alice", "alice@example.com")

    def test_missing_token(self) -> None:
        for token in (None, ""):
            with self.subTest(token=token):
                with self.assertRaises(AuthenticationError) as ctx:
                    self.service.authenticate(token)
                self.assertEqual(ctx.exception.code, "TOKEN_REQUIRED")
                self.assertEqual(ctx.exception.status_code, 401)

    def test_valid_token_yields_live_principal(self) -> None:
        self.users.update_profile(self.user.user_id, {"first_name": "Alice"})
        principal = self.service.authenticate(self.token)
        self.assertEqual(
            principal,
            CurrentUser(user_id=self.user.user_id, username="alice", email="alice@example.com"),
        )

    def test_long_lived_token_accepted(self) -> None:
        token = tokens.issue_long_lived_token(self.user.user_id)
        principal = self.service.authenticate(token)
        self.assertEqual(principal.username, "alice")

    def test_expired_and_invalid_tokens(self) -> None:
        expired = tokens.issue({"sub": str(self.user.user_id)}, timedelta(seconds=-1), TokenKind.SESSION)
        with self.assertRaises(TokenExpiredError):
            self.service.authenticate(expired)
        with self.assertRaises(InvalidTokenError):
            self.service.authenticate("not.a.token")

    def test_deactivation_revokes_existing_token(self) -> None:
        self.users.update_status(self.user.user_id, False)
        with self.assertRaises(AccountDeactivatedError):
            self.service.authenticate(self.token)

    def test_deleted_user(self) -> None:
        self.users.delete_user(self.user.user_id)
        with self.assertRaises(InvalidTokenError) as ctx:
            self.service.authenticate(self.token)
        self.assertEqual(ctx.exception.code, "USER_NOT_FOUND")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_admin_gate(self) -> None:
        principal = self.service.authenticate(self.token)
        with self.assertRaises(ForbiddenError):
            self.service.authorize_admin(principal)

        self.users.update_role(self.user.user_id, ROLE_ADMIN)
        admin = self.service.authorize_admin(principal)
        self.assertEqual(admin.role, ROLE_ADMIN)
        self.assertEqual(admin.user_id, self.user.user_id)


if __name__ == "__main__":
    unittest.main()
