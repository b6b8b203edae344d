"""
RSS Feed Client
===============

Fetches a feed document over HTTP and parses it into a channel with items.

One GET per call, no retries: the aggregator's rotation is the retry policy.
Transport, body-read and parse failures are reported as distinct errors,
each chained to the underlying cause.
"""

import html
import time
import xml.sax
from dataclasses import dataclass, field
from typing import Any, List, Optional

import feedparser
import requests

from ..config.settings import FetchSettings
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import FeedFetchError, FeedReadError, FeedParseError, ErrorCode


@dataclass
class RSSItem:
    """A single feed item with text fields unescaped."""

    title: str
    link: str
    description: str
    pub_date: str


@dataclass
class RSSFeed:
    """Feed channel metadata and its items."""

    title: str
    link: str
    description: str
    items: List[RSSItem] = field(default_factory=list)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return html.unescape(str(value)).strip()


class FeedClient:
    """HTTP feed fetcher and parser."""

    ACCEPT = "application/rss+xml, application/atom+xml, application/xml, text/xml, */*"

    def __init__(self, settings: Optional[FetchSettings] = None, session: Optional[requests.Session] = None):
        """Initialize feed client.

        Args:
            settings: Fetch settings (user agent, timeout)
            session: requests session to reuse, a new one by default
        """
        self.settings = settings or FetchSettings()
        self.logger = get_logger_for_component("feed_client")

        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": self.settings.user_agent,
                "Accept": self.ACCEPT,
            }
        )

    def fetch_feed(self, feed_url: str) -> RSSFeed:
        """Fetch and parse the feed at ``feed_url``.

        Raises:
            FeedFetchError: Network failure or HTTP error status
            FeedReadError: Response body could not be read
            FeedParseError: Body is not a feed document
        """
        self.logger.info(f"Fetching RSS feed: {feed_url}")
        start_time = time.time()

        response = None
        try:
            response = self.session.get(
                feed_url, timeout=self.settings.request_timeout, stream=True
            )
            response.raise_for_status()
        except requests.Timeout as e:
            self.logger.error(f"Timed out fetching feed {feed_url}: {e}")
            raise FeedFetchError(
                f"Timed out fetching feed {feed_url}: {e}",
                feed_url=feed_url,
                error_code=ErrorCode.FEED_FETCH_TIMEOUT,
            ) from e
        except requests.RequestException as e:
            self.logger.error(f"Failed to fetch feed {feed_url}: {e}")
            if response is not None:
                response.close()
            raise FeedFetchError(f"Failed to fetch feed {feed_url}: {e}", feed_url=feed_url) from e

        try:
            content = response.content
        except (requests.RequestException, OSError) as e:
            self.logger.error(f"Failed to read feed {feed_url}: {e}")
            raise FeedReadError(f"Failed to read feed {feed_url}: {e}", feed_url=feed_url) from e
        finally:
            response.close()

        self.logger.debug(
            f"Feed fetched in {time.time() - start_time:.2f}s, size: {len(content)} bytes"
        )

        feed = self.parse_feed(content, feed_url, headers=dict(response.headers))
        self.logger.info(f"Parsed {len(feed.items)} items from {feed_url}")
        return feed

    def parse_feed(self, content: bytes, feed_url: str = "", headers: Optional[dict] = None) -> RSSFeed:
        """Parse a feed document.

        Malformed XML is a parse error even when feedparser's lenient
        fallback recovers some items. Other bozo conditions (encoding or
        content-type mismatches) only warn, unless nothing was parsed.

        Raises:
            FeedParseError: If the content is malformed XML or not a feed
        """
        parsed = feedparser.parse(content, response_headers=headers or {})

        channel = parsed.get("feed", {})
        entries = parsed.get("entries", [])

        if parsed.get("bozo"):
            cause = parsed.get("bozo_exception")
            if isinstance(cause, xml.sax.SAXException):
                raise FeedParseError(
                    f"Malformed XML in feed {feed_url}: {cause}", feed_url=feed_url
                ) from cause
            if not entries and not channel.get("title"):
                raise FeedParseError(
                    f"Invalid feed document at {feed_url}: {cause}", feed_url=feed_url
                ) from cause
            self.logger.warning(f"Feed parsing warning for {feed_url}: {cause}")

        items = [
            RSSItem(
                title=_text(entry.get("title")),
                link=(entry.get("link") or "").strip(),
                description=_text(entry.get("description")),
                pub_date=(entry.get("published") or "").strip(),
            )
            for entry in entries
        ]

        return RSSFeed(
            title=_text(channel.get("title")),
            link=(channel.get("link") or feed_url).strip(),
            description=_text(channel.get("description")),
            items=items,
        )
