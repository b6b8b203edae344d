"""
Feed Management Commands
========================

Commands for registering feeds and managing the current user's follows.

Commands:
- addfeed <name> <url> - register a feed and follow it
- feeds                - list every feed with its creator
- follow <url>         - follow an existing feed
- unfollow <url>       - stop following a feed
- following            - list feeds the current user follows
"""

from rich.markup import escape
from rich.table import Table

from ..database.models import User
from ..utils.logging import get_logger_for_component
from ..utils.validators import require_args, validate_feed_url
from .registry import AuthenticatedCommandHandler, Command, CommandHandler


logger = get_logger_for_component("feed_commands")


class AddFeedCommand(AuthenticatedCommandHandler):
    """Creates a feed owned by the user, who then follows it."""

    usage = "addfeed <name> <url>"

    def execute(self, state, command: Command, user: User) -> None:
        require_args(command.name, command.args, 2, self.usage)
        name = command.args[0]
        url = validate_feed_url(command.args[1])

        feed = state.feeds.create_feed(name, url, user.id)
        follow = state.follows.create_feed_follow(user.id, feed.id)

        logger.info(f"{user.name} added feed {feed.url}")
        state.console.print(f"[green]Feed '{escape(feed.name)}' successfully created[/green]")
        state.console.print(
            f"'{escape(follow.user_name)}' is now following the feed '{escape(follow.feed_name)}'"
        )


class FeedsCommand(CommandHandler):
    usage = "feeds"

    def execute(self, state, command: Command) -> None:
        require_args(command.name, command.args, 0, self.usage)

        feeds = state.feeds.list_feeds()
        if not feeds:
            state.console.print("There are currently no feeds.")
            return

        table = Table(title="Feeds")
        table.add_column("Name", style="bold")
        table.add_column("URL", overflow="fold")
        table.add_column("Created by")
        for feed in feeds:
            table.add_row(escape(feed.name), escape(feed.url), escape(feed.user_name or "-"))

        state.console.print(table)


class FollowCommand(AuthenticatedCommandHandler):
    usage = "follow <url>"

    def execute(self, state, command: Command, user: User) -> None:
        require_args(command.name, command.args, 1, self.usage)

        feed = state.feeds.get_feed(command.args[0])
        follow = state.follows.create_feed_follow(user.id, feed.id)

        state.console.print(
            f"'{escape(follow.user_name)}' is now following the feed '{escape(follow.feed_name)}'"
        )


class UnfollowCommand(AuthenticatedCommandHandler):
    usage = "unfollow <url>"

    def execute(self, state, command: Command, user: User) -> None:
        require_args(command.name, command.args, 1, self.usage)

        feed = state.feeds.get_feed(command.args[0])
        state.follows.delete_feed_follow(user.id, feed.id)

        state.console.print(f"'{escape(user.name)}' has unfollowed the feed '{escape(feed.name)}'")


class FollowingCommand(AuthenticatedCommandHandler):
    usage = "following"

    def execute(self, state, command: Command, user: User) -> None:
        require_args(command.name, command.args, 0, self.usage)

        follows = state.follows.get_feed_follows_for_user(user.id)
        if not follows:
            state.console.print("You are currently not following any feeds.")
            return

        for follow in follows:
            state.console.print(escape(follow.feed_name or follow.feed_id))
