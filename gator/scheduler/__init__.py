"""Interval scheduler driving the ingestion pipeline."""

from .feed_scheduler import FeedScheduler

__all__ = ["FeedScheduler"]
