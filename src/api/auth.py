"""Authentication and profile API endpoints.

Handlers are plain functions so FastAPI runs them in its threadpool; password
hashing and database calls never block the event loop.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_auth_service, get_current_user, get_profile_service
from src.models.user import User
from src.schemas.auth import (
    LoginRequest,
    ProfileUpdate,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    UserView,
)
from src.schemas.common import ErrorResponse, MessageResponse
from src.services.auth import AuthService
from src.services.profile_service import ProfileService

router = APIRouter(tags=["auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def signup(
    user_data: SignupRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    return service.signup(user_data)


@router.post("/login", response_model=TokenResponse, responses={400: {"model": ErrorResponse}})
def login(
    credentials: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    return service.login(credentials)


@router.get("/profile", response_model=UserView, responses={401: {"model": ErrorResponse}})
def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Get current user profile."""
    return service.get_profile(current_user)


@router.put(
    "/profile",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def update_profile(
    profile_data: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Update any subset of the current user's profile fields."""
    return service.update_profile(current_user.id, profile_data)
