"""
Feed Follow Repository
======================

Repository for the user/feed subscription relation.
"""

import sqlite3
from typing import List

from ..database.connection import DatabaseConnection, to_db_timestamp
from ..database.models import FeedFollow
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, DuplicateResourceError, ResourceNotFoundError, ErrorCode


_FOLLOW_VIEW = """
    SELECT feed_follows.*, users.name AS user_name, feeds.name AS feed_name
    FROM feed_follows
    JOIN users ON users.id = feed_follows.user_id
    JOIN feeds ON feeds.id = feed_follows.feed_id
"""


class FeedFollowRepository:
    """Repository for creating, deleting and listing feed follows."""

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection
        self.logger = get_logger_for_component("feed_follow_repository")

    def create_feed_follow(self, user_id: str, feed_id: str) -> FeedFollow:
        """Make ``user_id`` follow ``feed_id``.

        Returns:
            The persisted follow, including user and feed names

        Raises:
            DuplicateResourceError: If the user already follows the feed
            DatabaseError: If the insert fails for any other reason
        """
        follow = FeedFollow(user_id=user_id, feed_id=feed_id)
        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO feed_follows (id, created_at, updated_at, user_id, feed_id)
                    VALUES (?, ?, ?, ?, ?)
                """,
                    (
                        follow.id,
                        to_db_timestamp(follow.created_at),
                        to_db_timestamp(follow.updated_at),
                        user_id,
                        feed_id,
                    ),
                )
                row = conn.execute(
                    _FOLLOW_VIEW + " WHERE feed_follows.id = ?", (follow.id,)
                ).fetchone()
                conn.commit()

        except sqlite3.IntegrityError as e:
            if "UNIQUE" not in str(e):
                raise DatabaseError(
                    f"Failed to create feed follow: {e}", error_code=ErrorCode.DATABASE_CONSTRAINT
                ) from e
            raise DuplicateResourceError(
                "Already following this feed", resource="feed_follow"
            ) from e
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to create feed follow: {e}") from e

        self.logger.info(f"User {user_id} now follows feed {feed_id}")
        return FeedFollow(**dict(row))

    def delete_feed_follow(self, user_id: str, feed_id: str) -> None:
        """Remove the follow between ``user_id`` and ``feed_id``.

        Raises:
            ResourceNotFoundError: If the user was not following the feed
        """
        try:
            with self.db.get_connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM feed_follows WHERE user_id = ? AND feed_id = ?",
                    (user_id, feed_id),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to delete feed follow: {e}") from e

        if cursor.rowcount == 0:
            raise ResourceNotFoundError(
                "You are not following this feed", resource="feed_follow"
            )

        self.logger.info(f"User {user_id} unfollowed feed {feed_id}")

    def get_feed_follows_for_user(self, user_id: str) -> List[FeedFollow]:
        """Get every follow of ``user_id`` ordered by feed name."""
        try:
            with self.db.get_connection() as conn:
                rows = conn.execute(
                    _FOLLOW_VIEW + " WHERE feed_follows.user_id = ? ORDER BY feeds.name",
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to get feed follows for user {user_id}: {e}") from e

        return [FeedFollow(**dict(row)) for row in rows]
