"""User data access layer."""

import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventhub.models import User
from eventhub.services.repositories.exceptions import DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


class UserRepository:
    """Centralized user data access.

    Naming conventions:
    - find_* : Query that may return None
    - get_* : Query that raises exception if missing

    Writes are flushed, not committed; the calling service owns the
    transaction.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, user_id: str) -> User | None:
        """Find user by primary key."""
        return self._db.query(User).filter(User.id == user_id).first()

    def get_by_id(self, user_id: str) -> User:
        """Get user by primary key, raising NotFoundError if missing."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_by_email(self, email: str) -> User | None:
        """Find user by email (exact, case-sensitive match)."""
        return self._db.query(User).filter(User.email == email).first()

    def insert(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        is_admin: bool = False,
    ) -> User:
        """Insert a new user.

        Raises:
            DuplicateError: If the email is already taken.
        """
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            is_admin=is_admin,
        )
        self._db.add(user)
        try:
            self._db.flush()
        except IntegrityError as e:
            self._db.rollback()
            raise DuplicateError("User", "email") from e
        self._db.refresh(user)
        return user

    def update_password_hash(self, user_id: str, password_hash: str) -> None:
        """Overwrite a user's stored password hash."""
        result = self._db.execute(
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount != 1:
            raise NotFoundError("User", user_id)
        logger.debug("Password hash updated for user %s", user_id)
