"""Signup, login, profile and password endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import get_auth_service, get_current_user
from app.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileResponse,
    SignupRequest,
    SignupResponse,
    UpdateProfileRequest,
    UpdateProfileResponse,
    UserProfile,
)
from app.services.auth import AuthService

router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> SignupResponse:
    """
    Register a new account. Username and email are stored lowercase and must
    be unique (409 otherwise).
    """
    return auth.signup(body.username, body.email, body.password)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns a 24h session token.
    Include the token in the Authorization header as: Bearer <token>
    """
    return auth.login(body.email, body.password)


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> ProfileResponse:
    user = auth.get_profile(current_user.user_id)
    return ProfileResponse(user=UserProfile.model_validate(user))


@router.put("/profile", response_model=UpdateProfileResponse)
def update_profile(
    body: UpdateProfileRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> UpdateProfileResponse:
    """Update first/last name, phone, date of birth or gender of the caller."""
    user = auth.update_profile(current_user.user_id, body)
    return UpdateProfileResponse(user=UserProfile.model_validate(user))


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    auth.change_password(current_user.user_id, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")
