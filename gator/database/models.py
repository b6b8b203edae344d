"""
Gator Data Models
=================

Pydantic data models for type safety and validation throughout the application.
These models correspond to the database schema and provide validation,
serialization, and type hints.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator
import uuid


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def _ensure_aware(v):
    # SQLite hands back ISO text; naive values are stored as UTC
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class TimestampedModel(BaseModel):
    """Base model with identifier and creation/update timestamps."""
    id: str = Field(default_factory=new_id, description="Unique identifier")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def validate_timezone(cls, v):
        return _ensure_aware(v)


class User(TimestampedModel):
    """Registered user; ``name`` is the login handle."""
    name: str = Field(..., min_length=1, max_length=255, description="Unique user name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("User name cannot be empty")
        return v

    def __str__(self) -> str:
        return f"User({self.name})"


class Feed(TimestampedModel):
    """RSS feed source model."""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    url: str = Field(..., min_length=1, description="Feed URL, globally unique")
    user_id: str = Field(..., description="Creator user ID")
    last_fetched_at: Optional[datetime] = Field(default=None, description="Last fetch attempt, None if never fetched")
    user_name: Optional[str] = Field(default=None, description="Creator name, filled by listing queries")

    @field_validator("last_fetched_at", mode="after")
    @classmethod
    def validate_fetched_timezone(cls, v):
        return _ensure_aware(v)

    def __str__(self) -> str:
        return f"Feed({self.name})"


class FeedFollow(TimestampedModel):
    """Many-to-many relation between users and feeds."""
    user_id: str = Field(..., description="Following user ID")
    feed_id: str = Field(..., description="Followed feed ID")
    user_name: Optional[str] = Field(default=None, description="Following user name")
    feed_name: Optional[str] = Field(default=None, description="Followed feed name")

    def __str__(self) -> str:
        return f"FeedFollow({self.user_name or self.user_id} -> {self.feed_name or self.feed_id})"


class Post(TimestampedModel):
    """Ingested feed item. ``url`` is globally unique and drives deduplication."""
    title: str = Field(default="", description="Post title")
    url: str = Field(..., description="Post URL")
    description: Optional[str] = Field(default=None, description="Post description")
    published_at: datetime = Field(..., description="Normalized publication time")
    feed_id: str = Field(..., description="Source feed ID")
    feed_name: Optional[str] = Field(default=None, description="Source feed name, filled by browse queries")

    @field_validator("published_at", mode="after")
    @classmethod
    def validate_published_timezone(cls, v):
        return _ensure_aware(v)

    def __str__(self) -> str:
        return f"Post({self.title[:50]})"
