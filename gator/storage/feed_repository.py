"""
Feed Repository
===============

Repository pattern implementation for RSS feed data management, including
the fetch rotation used by the aggregator.
"""

import sqlite3
from datetime import datetime
from typing import List, Optional

from ..database.connection import DatabaseConnection, to_db_timestamp
from ..database.models import Feed, utc_now
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import (
    DatabaseError,
    DuplicateResourceError,
    NoFeedsAvailableError,
    ResourceNotFoundError,
    ErrorCode,
)


class FeedRepository:
    """Repository for managing RSS feed data in the database."""

    def __init__(self, db_connection: DatabaseConnection):
        """Initialize feed repository.

        Args:
            db_connection: Database connection manager
        """
        self.db = db_connection
        self.logger = get_logger_for_component("feed_repository")

    def create_feed(self, name: str, url: str, user_id: str) -> Feed:
        """Create a new feed owned by ``user_id``.

        Returns:
            The persisted feed

        Raises:
            DuplicateResourceError: If a feed with this URL already exists
            DatabaseError: If database operation fails
        """
        feed = Feed(name=name, url=url, user_id=user_id)
        try:
            with self.db.get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO feeds (
                        id, created_at, updated_at, name, url, user_id, last_fetched_at
                    ) VALUES (?, ?, ?, ?, ?, ?, NULL)
                """,
                    (
                        feed.id,
                        to_db_timestamp(feed.created_at),
                        to_db_timestamp(feed.updated_at),
                        feed.name,
                        feed.url,
                        feed.user_id,
                    ),
                )
                conn.commit()

        except sqlite3.IntegrityError as e:
            if "UNIQUE" not in str(e):
                raise DatabaseError(
                    f"Failed to create feed: {e}", error_code=ErrorCode.DATABASE_CONSTRAINT
                ) from e
            raise DuplicateResourceError(
                f"A feed with URL {url} already exists", resource="feed"
            ) from e
        except sqlite3.Error as e:
            self.logger.error(f"Failed to create feed: {e}")
            raise DatabaseError(
                f"Failed to create feed: {e}", error_code=ErrorCode.DATABASE_ERROR
            ) from e

        self.logger.info(f"Created feed {feed.id} for user {user_id}: {url}")
        return feed

    def get_feed(self, url: str) -> Feed:
        """Get feed by URL.

        Raises:
            ResourceNotFoundError: If no feed has this URL
        """
        row = self._fetch_one("SELECT * FROM feeds WHERE url = ?", (url,))
        if not row:
            raise ResourceNotFoundError(f"No feed found with URL {url}", resource="feed")
        return self._row_to_feed(row)

    def get_feed_by_id(self, feed_id: str) -> Feed:
        """Get feed by ID.

        Raises:
            ResourceNotFoundError: If no feed has this ID
        """
        row = self._fetch_one("SELECT * FROM feeds WHERE id = ?", (feed_id,))
        if not row:
            raise ResourceNotFoundError(f"No feed found with ID {feed_id}", resource="feed")
        return self._row_to_feed(row)

    def list_feeds(self) -> List[Feed]:
        """Get all feeds with the name of the user who added them."""
        try:
            with self.db.get_connection() as conn:
                rows = conn.execute(
                    """
                    SELECT feeds.*, users.name AS user_name
                    FROM feeds
                    LEFT JOIN users ON users.id = feeds.user_id
                    ORDER BY feeds.created_at
                """
                ).fetchall()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to list feeds: {e}") from e

        return [self._row_to_feed(row) for row in rows]

    def get_next_feed_to_fetch(self) -> Feed:
        """Get the feed most overdue for a refresh.

        Feeds never fetched come first, then the oldest ``last_fetched_at``.

        Raises:
            NoFeedsAvailableError: If there are no feeds at all
        """
        row = self._fetch_one(
            """
            SELECT * FROM feeds
            ORDER BY last_fetched_at IS NOT NULL, last_fetched_at ASC, created_at ASC
            LIMIT 1
        """
        )
        if not row:
            raise NoFeedsAvailableError()
        return self._row_to_feed(row)

    def mark_feed_fetched(self, feed_id: str, fetched_at: Optional[datetime] = None) -> None:
        """Record a fetch attempt for a feed.

        Args:
            feed_id: Feed ID
            fetched_at: Attempt time, defaults to now

        Raises:
            ResourceNotFoundError: If the feed does not exist
            DatabaseError: If the update fails
        """
        fetched_at = fetched_at or utc_now()
        try:
            with self.db.get_connection() as conn:
                cursor = conn.execute(
                    "UPDATE feeds SET last_fetched_at = ?, updated_at = ? WHERE id = ?",
                    (to_db_timestamp(fetched_at), to_db_timestamp(fetched_at), feed_id),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to mark feed {feed_id} fetched: {e}") from e

        if cursor.rowcount == 0:
            raise ResourceNotFoundError(f"No feed found with ID {feed_id}", resource="feed")

        self.logger.debug(f"Marked feed {feed_id} fetched at {fetched_at.isoformat()}")

    def _fetch_one(self, query: str, params: tuple = ()):
        try:
            with self.db.get_connection() as conn:
                return conn.execute(query, params).fetchone()
        except sqlite3.Error as e:
            raise DatabaseError(f"Feed query failed: {e}", query=query) from e

    def _row_to_feed(self, row) -> Feed:
        """Convert database row to Feed object."""
        data = dict(row)
        return Feed(
            id=data["id"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            name=data["name"],
            url=data["url"],
            user_id=data["user_id"],
            last_fetched_at=data["last_fetched_at"],
            user_name=data.get("user_name"),
        )
