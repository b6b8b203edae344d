"""
Gator Ingestion Module
======================

Feed fetching and parsing, and publish date normalization.
"""

from .feed_client import FeedClient, RSSFeed, RSSItem
from .timestamps import normalize_timestamp, parse_timestamp

__all__ = [
    "FeedClient",
    "RSSFeed",
    "RSSItem",
    "normalize_timestamp",
    "parse_timestamp",
]
