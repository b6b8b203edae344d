"""
User Repository
===============

Repository pattern implementation for user registration, lookup and reset.
"""

import sqlite3
from typing import List

from pydantic import ValidationError as PydanticValidationError

from ..database.connection import DatabaseConnection, to_db_timestamp
from ..database.models import User
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import (
    DatabaseError,
    DuplicateResourceError,
    ResourceNotFoundError,
    ValidationError,
    ErrorCode,
)


class UserRepository:
    """Repository for managing users in the database."""

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize user repository.

        Args:
            db_connection: Database connection manager
        """
        self.db = db_connection
        self.logger = get_logger_for_component("user_repository")

    def create_user(self, name: str) -> User:
        """Register a new user.

        Args:
            name: Unique user name

        Returns:
            The persisted user

        Raises:
            ValidationError: If the name is blank or too long
            DuplicateResourceError: If a user with this name already exists
            DatabaseError: If the insert fails for any other reason
        """
        try:
            user = User(name=name)
        except PydanticValidationError as e:
            reason = e.errors()[0]["msg"].removeprefix("Value error, ")
            raise ValidationError(reason, field_name="name") from e

        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    "INSERT INTO users (id, created_at, updated_at, name) VALUES (?, ?, ?, ?)",
                    (
                        user.id,
                        to_db_timestamp(user.created_at),
                        to_db_timestamp(user.updated_at),
                        user.name,
                    ),
                )
                conn.commit()

        except sqlite3.IntegrityError as e:
            raise DuplicateResourceError(
                f"User '{user.name}' already exists", resource="user"
            ) from e
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to create user: {e}", error_code=ErrorCode.DATABASE_ERROR
            ) from e

        self.logger.info(f"Created user {user.name}")
        return user

    def get_user(self, name: str) -> User:
        """Get a user by name.

        Raises:
            ResourceNotFoundError: If no user has this name
        """
        try:
            with self.db.get_connection() as conn:
                row = conn.execute(
                    "SELECT * FROM users WHERE name = ?", (name,)
                ).fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get user {name}: {e}") from e

        if not row:
            raise ResourceNotFoundError(f"User '{name}' doesn't exist", resource="user")
        return User(**dict(row))

    def list_users(self) -> List[User]:
        """Get all users ordered by name."""
        try:
            with self.db.get_connection() as conn:
                rows = conn.execute("SELECT * FROM users ORDER BY name").fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to list users: {e}") from e

        return [User(**dict(row)) for row in rows]

    def reset_users(self) -> int:
        """Delete every user; feeds, follows and posts cascade.

        Returns:
            Number of users deleted
        """
        try:
            with self.db.get_connection() as conn:
                cursor = conn.execute("DELETE FROM users")
                conn.commit()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to reset users: {e}") from e

        self.logger.info(f"Deleted {cursor.rowcount} users")
        return cursor.rowcount
