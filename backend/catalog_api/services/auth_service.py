"""
Authentication Service.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from catalog_api.config import Settings, settings as default_settings
from catalog_api.core import security
from catalog_api.core.exceptions import Conflict, Unauthorized, UniqueConstraintViolation
from catalog_api.models.user import User
from catalog_api.repositories import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings

    def authenticate_user(
        self, db: Session, username: str, password: str
    ) -> Optional[User]:
        """Authenticate a user by username and password."""
        user = self.get_user_by_username(db, username)
        if not user:
            return None
        if not security.verify_password(password, user.hashed_password):
            return None
        return user

    def get_user_by_username(self, db: Session, username: str) -> Optional[User]:
        """Get a user by username."""
        return UserRepository(db).select_by_username(username)

    def create_user(self, db: Session, username: str, password: str) -> User:
        """Create a new user."""
        users = UserRepository(db)
        if users.select_by_username(username):
            raise Conflict("Username already exists")

        hashed_password = security.get_password_hash(
            password, rounds=self.settings.BCRYPT_ROUNDS
        )
        try:
            user = users.insert(username=username, hashed_password=hashed_password)
        except UniqueConstraintViolation:
            raise Conflict("Username already exists")
        logger.info(f"Created user {username}")
        return user

    def create_user_token(self, user: User) -> str:
        """Create access token for user."""
        return security.issue_token(user.id, user.username, settings=self.settings)

    def login(self, db: Session, username: str, password: str) -> Dict[str, Any]:
        """
        Exchange credentials for a token.

        Raises:
            Unauthorized: unknown user or wrong password.
        """
        user = self.authenticate_user(db, username, password)
        if not user:
            logger.info(f"Failed login for {username}")
            raise Unauthorized("Invalid credentials")
        return {
            "token": self.create_user_token(user),
            "user": {"id": user.id, "username": user.username},
        }

    def verify(self, token: str) -> Dict[str, Any]:
        return security.verify_token(token, settings=self.settings)

