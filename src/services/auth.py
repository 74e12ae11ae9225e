"""Authentication service for JWT and password handling."""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import Settings
from src.exceptions import DuplicateResource, InternalFailure, InvalidCredentials, Unauthenticated
from src.models.user import User
from src.schemas.auth import (
    MAX_PASSWORD_BYTES,
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
)

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Passwords longer than bcrypt can hash never match, instead of matching on
    their first 72 bytes.
    """
    if len(plain_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password; raises ValueError past bcrypt's 72-byte limit."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password exceeds {MAX_PASSWORD_BYTES} bytes")
    return pwd_context.hash(password)


def create_access_token(user_id: int, settings: Settings, now: datetime | None = None) -> str:
    """Create a JWT access token for a user.

    Args:
        user_id: ID stored in the ``sub`` claim
        settings: Supplies the signing key, algorithm and lifetime
        now: Issue time, defaults to the current time
    """
    issued_at = now or datetime.now(UTC)
    expire = issued_at + timedelta(days=settings.jwt_expiration_days)
    to_encode = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> dict:
    """Decode and validate a JWT token.

    Bad signatures, malformed tokens, expired tokens and tokens without a
    subject all raise the same Unauthenticated error.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise Unauthenticated() from e
    if payload.get("sub") is None:
        raise Unauthenticated()
    return payload


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email (exact match)."""
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        logger.error(f"User lookup failed: {e}")
        raise InternalFailure() from e


def save_user(db: Session, user: User) -> None:
    """Commit pending changes to a user.

    A unique-constraint violation is the authoritative duplicate-email signal;
    the lookups done before saving only short-circuit the common case.
    """
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Rejected write: email already registered")
        raise DuplicateResource() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save user: {e}")
        raise InternalFailure() from e
    db.refresh(user)


class AuthService:
    """Signup and login flows."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def signup(self, data: SignupRequest) -> SignupResponse:
        """Create a user and issue a token for it."""
        if get_user_by_email(self.db, data.email) is not None:
            raise DuplicateResource()

        user = User(
            name=data.name,
            email=data.email,
            password_hash=get_password_hash(data.password),
            phone=data.phone,
            profile_picture=data.profile_picture,
        )
        save_user(self.db, user)
        logger.info(f"Created user {user.id}")

        return SignupResponse(
            message="User created successfully",
            token=create_access_token(user.id, self.settings),
        )

    def login(self, credentials: LoginRequest) -> TokenResponse:
        """Verify credentials and mint a new token."""
        user = get_user_by_email(self.db, credentials.email)
        if user is None:
            # Spend the same hashing time as a real check
            pwd_context.dummy_verify()
            raise InvalidCredentials()
        if not verify_password(credentials.password, user.password_hash):
            raise InvalidCredentials()

        logger.info(f"User {user.id} logged in")
        return TokenResponse(token=create_access_token(user.id, self.settings))
