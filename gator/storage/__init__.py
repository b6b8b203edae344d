"""
Gator Storage Layer
===================

Repository pattern implementations for data access abstraction:
users, feeds, feed follows and posts, each over the shared SQLite pool.
"""

from .user_repository import UserRepository
from .feed_repository import FeedRepository
from .feed_follow_repository import FeedFollowRepository
from .post_repository import PostRepository

__all__ = [
    "UserRepository",
    "FeedRepository",
    "FeedFollowRepository",
    "PostRepository",
]
