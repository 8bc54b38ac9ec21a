import logging
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import models, schemas
from errors import DuplicateUserError, StoreError

logger = logging.getLogger(__name__)


def conflict_message(existing: models.User, username: str) -> str:
    if existing.username == username:
        return "Username already exists"
    return "Email already registered"


class UserStore:
    """User records. Username and email are each unique."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_username_or_email(self, username: str, email: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(
            or_(models.User.username == username, models.User.email == email)
        ).first()

    def find_by_email(self, email: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.email == email).first()

    def find_by_id(self, user_id: int) -> Optional[schemas.UserProfile]:
        user = self.db.get(models.User, user_id)
        if user is None:
            return None
        return schemas.UserProfile.model_validate(user)

    def create(self, username: str, email: str, password_hash: str) -> models.User:
        """Inserts a user; raises DuplicateUserError on a username or email clash."""
        existing = self.find_by_username_or_email(username, email)
        if existing:
            raise DuplicateUserError(conflict_message(existing, username))

        user = models.User(username=username, email=email, hashed_password=password_hash)
        self.db.add(user)
        try:
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as e:
            # lost a race with a concurrent registration
            self.db.rollback()
            logger.warning("Unique constraint hit while creating %r: %s", username, e)
            existing = self.find_by_username_or_email(username, email)
            message = conflict_message(existing, username) if existing else None
            raise DuplicateUserError(message) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError("Registration failed") from e

        logger.info("Created user %s (ID: %s)", user.username, user.id)
        return user
