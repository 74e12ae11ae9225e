"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.database import get_db
from src.exceptions import InternalFailure, Unauthenticated
from src.models.user import User
from src.services.auth import AuthService, decode_access_token
from src.services.profile_service import ProfileService

# Missing headers are reported as Unauthenticated by get_current_user
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
    x_auth_token: Annotated[str | None, Header()] = None,
) -> User:
    """Get the current authenticated user from JWT token.

    Reads ``Authorization: Bearer <token>``, falling back to the legacy
    ``x-auth-token`` header.
    """
    token = credentials.credentials if credentials is not None else x_auth_token
    if not token:
        raise Unauthenticated()

    payload = decode_access_token(token, settings)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise Unauthenticated() from e

    try:
        user = db.get(User, user_id)
    except SQLAlchemyError as e:
        raise InternalFailure() from e

    # A token for a user that no longer exists looks the same as a bad token
    if user is None:
        raise Unauthenticated()

    return user


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db, settings)


def get_profile_service(
    db: Annotated[Session, Depends(get_db)],
) -> ProfileService:
    """Get profile service with dependencies."""
    return ProfileService(db)
