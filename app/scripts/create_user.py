"""
Create a user (e.g. the first admin, since signup only creates customers). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import ValidationError
from app.core.security import PasswordHasher
from app.models import ROLE_CUSTOMER, ROLES
from app.repositories.users import DuplicateKeyError, UserRepository
from app.services.auth import validate_signup_fields


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a storefront back-office user.")
    parser.add_argument("username", help="Username (3+ chars, no spaces)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6+ chars)")
    parser.add_argument("role", nargs="?", default=ROLE_CUSTOMER, choices=list(ROLES))
    args = parser.parse_args(argv)

    try:
        username, email = validate_signup_fields(args.username, args.email, args.password)
    except ValidationError as e:
        print(e.message, file=sys.stderr)
        return 1

    hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
    db = SessionLocal()
    try:
        users = UserRepository(db)
        if users.find_by_username(username) or users.find_by_email(email):
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        try:
            user = users.create(
                username=username,
                email=email,
                password_hash=hasher.hash(args.password),
                role=args.role,
            )
        except DuplicateKeyError:
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        print(f"Created user '{user.username}' (id {user.user_id}) with role '{user.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
