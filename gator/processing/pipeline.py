"""
Feed Ingestion Pipeline
=======================

One aggregation cycle:

1. Pick the feed most overdue for a refresh.
2. Mark it fetched *before* fetching, so a permanently broken feed rotates to
   the back of the queue instead of being retried every cycle.
3. Fetch and parse it.
4. Store each item as a post; URLs already stored are skipped.

Only steps 1-3 can fail a cycle. Per-item problems (duplicate URL, bad date,
rejected insert) are absorbed and counted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from ..database.models import Feed, Post, utc_now
from ..ingestion.feed_client import FeedClient, RSSItem
from ..ingestion.timestamps import normalize_timestamp
from ..storage.feed_repository import FeedRepository
from ..storage.post_repository import PostRepository
from ..utils.logging import get_logger_for_component, PerformanceLogger
from ..utils.exceptions import DatabaseError, DuplicateResourceError


@dataclass
class CycleResult:
    """Outcome of one ingestion cycle."""

    feed: Feed
    started_at: datetime
    items_seen: int = 0
    posts_created: int = 0
    duplicates: int = 0
    failed_items: int = 0
    feed_title: Optional[str] = None
    errors: list = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"{self.feed.name}: {self.posts_created} new, "
            f"{self.duplicates} already stored, {self.failed_items} failed "
            f"({self.items_seen} items)"
        )


class IngestionPipeline:
    """Fetches the next due feed and stores its items as posts."""

    def __init__(
        self,
        feed_repository: FeedRepository,
        post_repository: PostRepository,
        feed_client: FeedClient,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the pipeline.

        Args:
            feed_repository: Source of the fetch rotation
            post_repository: Destination for ingested posts
            feed_client: HTTP fetcher and parser
            clock: Time source for fetch marks and date fallbacks
        """
        self.feeds = feed_repository
        self.posts = post_repository
        self.client = feed_client
        self.clock = clock or utc_now
        self.logger = get_logger_for_component("pipeline")

    def run_cycle(self) -> CycleResult:
        """Run one ingestion cycle.

        Raises:
            NoFeedsAvailableError: If the store holds no feeds
            DatabaseError: If the feed cannot be marked fetched
            FeedError: If the feed cannot be fetched or parsed
        """
        started_at = self.clock()
        feed = self.feeds.get_next_feed_to_fetch()
        self.feeds.mark_feed_fetched(feed.id, started_at)

        with PerformanceLogger(self.logger, f"ingestion of {feed.url}", feed_id=feed.id):
            document = self.client.fetch_feed(feed.url)

            result = CycleResult(feed=feed, started_at=started_at, feed_title=document.title)
            for item in document.items:
                result.items_seen += 1
                self._store_item(feed, item, result)

        self.logger.info(f"Collected {result.summary()}")
        return result

    def _store_item(self, feed: Feed, item: RSSItem, result: CycleResult) -> None:
        try:
            post = Post(
                title=item.title,
                url=item.link,
                description=item.description or None,
                published_at=normalize_timestamp(item.pub_date, now=self.clock),
                feed_id=feed.id,
            )
            self.posts.create_post(post)
        except DuplicateResourceError:
            result.duplicates += 1
            return
        except (DatabaseError, PydanticValidationError) as e:
            result.failed_items += 1
            result.errors.append(str(e))
            self.logger.warning(f"Skipping item {item.link!r} from {feed.url}: {e}")
            return

        result.posts_created += 1
