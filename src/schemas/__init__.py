"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import (
    LoginRequest,
    ProfileUpdate,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    UserView,
)
from src.schemas.common import ErrorResponse, HealthResponse, MessageResponse

__all__ = [
    "SignupRequest",
    "SignupResponse",
    "LoginRequest",
    "TokenResponse",
    "ProfileUpdate",
    "UserView",
    "MessageResponse",
    "ErrorResponse",
    "HealthResponse",
]
