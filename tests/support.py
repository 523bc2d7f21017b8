"""Shared test wiring: in-memory SQLite store, cheap hasher and app overrides."""

from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_password_hasher, get_token_service
from app.core.database import get_db
from app.core.security import PasswordHasher, TokenService
from app.main import app
from app.models import Base, User
from app.repositories.users import UserRepository

TEST_JWT_SECRET = "test-signing-key-0123456789abcdef0123456789"

# Lowest bcrypt cost keeps the suite fast; the algorithm is unchanged.
hasher = PasswordHasher(rounds=4)
tokens = TokenService(secret=TEST_JWT_SECRET)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def make_client(session_factory: sessionmaker, **kwargs: object) -> TestClient:
    """TestClient whose dependencies use the given store, the test hasher and signer."""

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_token_service] = lambda: tokens
    return TestClient(app, **kwargs)


def clear_overrides() -> None:
    app.dependency_overrides.clear()


def create_user(
    session: Session,
    username: str = "bob",
    email: str = "bob@example.com",
    password: str = "bobpass1",
    role: str | None = None,
    is_active: bool = True,
) -> User:
    """Insert a user directly through the repository."""
    users = UserRepository(session)
    user = users.create(
        username=username,
        email=email,
        password_hash=hasher.hash(password),
        role=role,
    )
    if not is_active:
        users.update_status(user.user_id, False)
    return users.find_by_id(user.user_id)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
