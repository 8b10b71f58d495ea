"""User domain service."""

from typing import Optional

from fincontrol.database.base import Database
from fincontrol.domain.entities import User as UserEntity
from fincontrol.domain.errors import ConflictError, duplicate_user_email
from fincontrol.domain.validation import validate_user


class UserService:
    """Service for managing users."""

    def __init__(self, db: Database):
        """Initialize user service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_user(self, name: str, email: str) -> int:
        """Create a new user.

        Args:
            name: Display name
            email: Email address, stored lower case

        Returns:
            User ID

        Raises:
            ValidationError: If name or email is invalid
            ConflictError: If a user with the same email exists
        """
        data = validate_user({"name": name, "email": email})
        if self.db.get_user_by_email(data["email"]) is not None:
            raise ConflictError(duplicate_user_email(data["email"]))
        return self.db.create_user(name=data["name"], email=data["email"])

    def get_user(self, user_id: int) -> Optional[UserEntity]:
        """Get user by ID."""
        return self.db.get_user(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserEntity]:
        """Get user by email address."""
        return self.db.get_user_by_email(email)

    def list_users(self) -> list[UserEntity]:
        """List all users."""
        return self.db.list_users()
