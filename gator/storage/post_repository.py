"""
Post Repository
===============

Repository for ingested posts. The unique constraint on ``posts.url`` is the
deduplication mechanism: inserting a known URL raises DuplicateResourceError.
"""

import sqlite3
from typing import List

from ..database.connection import DatabaseConnection, to_db_timestamp
from ..database.models import Post
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import DatabaseError, DuplicateResourceError, ErrorCode


class PostRepository:
    """Repository for Post creation and per-user browsing."""

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize post repository.

        Args:
            db_connection: Database connection manager
        """
        self.db = db_connection
        self.logger = get_logger_for_component("post_repository")

    def create_post(self, post: Post) -> Post:
        """Create a new post.

        Args:
            post: Post model to create

        Returns:
            The persisted post

        Raises:
            DuplicateResourceError: If a post with the same URL exists
            DatabaseError: If creation fails
        """
        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO posts (id, created_at, updated_at, title, url,
                                       description, published_at, feed_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        post.id,
                        to_db_timestamp(post.created_at),
                        to_db_timestamp(post.updated_at),
                        post.title,
                        post.url,
                        post.description,
                        to_db_timestamp(post.published_at),
                        post.feed_id,
                    ),
                )
                conn.commit()

        except sqlite3.IntegrityError as e:
            if "posts.url" in str(e):
                raise DuplicateResourceError(
                    f"Post already stored: {post.url}",
                    resource="post",
                    error_code=ErrorCode.DUPLICATE_RESOURCE,
                ) from e
            raise DatabaseError(
                f"Failed to create post: {e}",
                error_code=ErrorCode.DATABASE_CONSTRAINT,
            ) from e
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to create post: {e}",
                error_code=ErrorCode.DATABASE_ERROR
            ) from e

        self.logger.debug(f"Created post: {post.id}")
        return post

    def get_posts_for_user(self, user_id: str, limit: int = 2) -> List[Post]:
        """Get the newest posts from the feeds a user follows.

        Args:
            user_id: Following user ID
            limit: Maximum number of posts to return

        Returns:
            Posts ordered by publication time, newest first
        """
        try:
            with self.db.get_connection() as conn:
                rows = conn.execute(
                    """
                    SELECT posts.*, feeds.name AS feed_name
                    FROM posts
                    JOIN feed_follows ON feed_follows.feed_id = posts.feed_id
                    JOIN feeds ON feeds.id = posts.feed_id
                    WHERE feed_follows.user_id = ?
                    ORDER BY posts.published_at DESC
                    LIMIT ?
                    """,
                    (user_id, limit),
                ).fetchall()
        except sqlite3.Error as e:
            self.logger.error(f"Failed to get posts for user {user_id}: {e}")
            raise DatabaseError(f"Failed to get posts for user {user_id}: {e}") from e

        return [Post(**dict(row)) for row in rows]
