"""
Aggregation Commands
====================

Commands:
- agg <interval> - fetch feeds in rotation, one per interval, until stopped
- browse [limit] - show the newest posts from followed feeds
"""

from rich.markup import escape

from ..config.settings import MAX_BROWSE_LIMIT
from ..database.models import User
from ..processing.pipeline import CycleResult, IngestionPipeline
from ..scheduler.feed_scheduler import FeedScheduler
from ..utils.logging import get_logger_for_component
from ..utils.validators import format_duration, parse_duration, require_args
from ..utils.exceptions import UsageError
from .registry import AuthenticatedCommandHandler, Command, CommandHandler


logger = get_logger_for_component("aggregate_commands")


class AggCommand(CommandHandler):
    """Runs the ingestion scheduler in the foreground."""

    usage = "agg <interval>"

    def __init__(self, scheduler_factory=FeedScheduler):
        self.scheduler_factory = scheduler_factory

    def execute(self, state, command: Command) -> None:
        require_args(command.name, command.args, 1, self.usage)
        interval = parse_duration(command.args[0])

        pipeline = IngestionPipeline(state.feeds, state.posts, state.feed_client)

        def report(result: CycleResult) -> None:
            state.console.print(f"Collected {escape(result.summary())}")

        scheduler = self.scheduler_factory(pipeline, interval, on_cycle=report)
        scheduler.install_signal_handlers()

        state.console.print(f"Collecting feeds every {format_duration(interval)}")
        scheduler.run()


class BrowseCommand(AuthenticatedCommandHandler):
    usage = "browse [limit]"

    def execute(self, state, command: Command, user: User) -> None:
        require_args(command.name, command.args, 0, self.usage, maximum=1)
        limit = self._parse_limit(command, state.settings.browse.default_limit)

        posts = state.posts.get_posts_for_user(user.id, limit)
        logger.debug(f"Showing {len(posts)} post(s) to {user.name}")
        if not posts:
            state.console.print("No posts yet. Follow some feeds and run 'agg'.")
            return

        for post in posts:
            state.console.print(f"[bold]{escape(post.title or post.url)}[/bold]")
            state.console.print(f"Feed: {escape(post.feed_name or post.feed_id)}")
            state.console.print(f"Published: {post.published_at:%Y-%m-%d %H:%M:%S %Z}")
            state.console.print(f"Link: {escape(post.url)}")
            if post.description:
                state.console.print(escape(post.description))
            state.console.print()

    def _parse_limit(self, command: Command, default: int) -> int:
        if not command.args:
            return default

        raw = command.args[0]
        try:
            limit = int(raw)
        except ValueError:
            raise UsageError(
                f"Limit must be an integer, got '{raw}'", command=command.name, usage=self.usage
            ) from None

        if not 1 <= limit <= MAX_BROWSE_LIMIT:
            raise UsageError(
                f"Limit must be between 1 and {MAX_BROWSE_LIMIT}, got {raw}",
                command=command.name,
                usage=self.usage,
            )
        return limit
