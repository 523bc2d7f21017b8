"""
Mint a long-lived (default 30 day) bearer token for an automation client. Run from project root:
  python -m app.scripts.issue_token USERNAME
The token is accepted by every authenticated route for as long as the user stays active.
"""
import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import TokenService
from app.repositories.users import UserRepository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Issue a long-lived API token for a user.")
    parser.add_argument("username", help="Existing username")
    args = parser.parse_args(argv)

    settings = get_settings()
    tokens = TokenService.from_settings(settings)
    db = SessionLocal()
    try:
        user = UserRepository(db).find_by_username(args.username.lower())
        if user is None:
            print(f"User '{args.username}' not found.", file=sys.stderr)
            return 1
        if not user.is_active:
            print(f"User '{user.username}' is deactivated.", file=sys.stderr)
            return 1
        token = tokens.issue_long_lived_token(user.user_id)
        logger.info(
            "Issued long-lived token",
            extra={"user_id": user.user_id, "ttl_days": settings.LONG_LIVED_TOKEN_EXPIRE_DAYS},
        )
        print(token)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
