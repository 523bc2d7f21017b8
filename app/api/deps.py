"""Dependency providers: services wired per request and the auth gates."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import PasswordHasher, TokenService
from app.repositories.users import UserRepository
from app.schemas.auth import AdminUser, CurrentUser
from app.services.auth import AuthService
from app.services.users import UserAdminService

security = HTTPBearer(auto_error=False)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService.from_settings(settings)


def get_user_repository(db: Annotated[Session, Depends(get_db)]) -> UserRepository:
    return UserRepository(db)


def get_auth_service(
    users: Annotated[UserRepository, Depends(get_user_repository)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    return AuthService(users, hasher, tokens)


def get_user_admin_service(
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> UserAdminService:
    return UserAdminService(users)


def get_current_user(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """Dependency: require a valid Bearer token for an active user. 401/403 otherwise."""
    return auth.authenticate(credentials.credentials if credentials else None)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> AdminUser:
    """Dependency: require an authenticated user whose live role is 'admin'. 403 otherwise."""
    return auth.authorize_admin(current_user)
