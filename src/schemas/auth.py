"""Authentication and profile schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, EmailStr, Field

# bcrypt ignores everything past the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

# Existing clients send camelCase
PROFILE_PICTURE_ALIASES = AliasChoices("profile_picture", "profilePicture")


def check_password_bytes(value: str) -> str:
    """Reject passwords that bcrypt would silently truncate."""
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=1), AfterValidator(check_password_bytes)]


class SignupRequest(BaseModel):
    """User signup request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: Password
    phone: str | None = Field(None, max_length=50)
    profile_picture: str | None = Field(
        None, max_length=2048, validation_alias=PROFILE_PICTURE_ALIASES
    )


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: Password


class ProfileUpdate(BaseModel):
    """Partial profile update; fields left out are not touched."""

    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    profile_picture: str | None = Field(
        None, max_length=2048, validation_alias=PROFILE_PICTURE_ALIASES
    )
    password: Password | None = None


class TokenResponse(BaseModel):
    """JWT token response."""

    token: str


class SignupResponse(BaseModel):
    """Signup response with a success message and a fresh token."""

    message: str
    token: str


class UserView(BaseModel):
    """User information response. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None
    profile_picture: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None
