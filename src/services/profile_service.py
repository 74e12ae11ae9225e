"""Profile read and update operations."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.exceptions import DuplicateResource, InternalFailure, NotFound
from src.models.user import User
from src.schemas.auth import ProfileUpdate, UserView
from src.schemas.common import MessageResponse
from src.services.auth import get_password_hash, get_user_by_email, save_user

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for reading and updating the authenticated user's profile."""

    def __init__(self, db: Session):
        self.db = db

    def get_profile(self, user: User) -> UserView:
        return UserView.model_validate(user)

    def update_profile(self, user_id: int, data: ProfileUpdate) -> MessageResponse:
        """
        Apply a partial update to a user.

        Only fields sent with a non-empty value are changed; null and "" leave
        the stored value alone. A new password is hashed; the current password
        is not required.
        """
        try:
            user = self.db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error(f"User lookup failed: {e}")
            raise InternalFailure() from e
        if user is None:
            raise NotFound()

        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value not in (None, "")
        }

        email = changes.pop("email", None)
        if email is not None and email != user.email:
            if get_user_by_email(self.db, email) is not None:
                raise DuplicateResource()
            user.email = email

        password = changes.pop("password", None)
        if password is not None:
            user.password_hash = get_password_hash(password)

        for field, value in changes.items():
            setattr(user, field, value)

        save_user(self.db, user)
        logger.info(f"Updated profile for user {user.id}")
        return MessageResponse(message="Profile updated successfully")
