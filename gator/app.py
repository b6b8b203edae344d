"""
Gator Application Wiring
========================

Builds the shared application state (config, database, repositories, feed
client, console) and the command registry. This is the only place where
concrete collaborators are chosen; handlers receive everything through the
state object.
"""

import sqlite3
from dataclasses import dataclass
from typing import Optional

import requests
from rich.console import Console

from .commands.registry import CommandRegistry
from .commands.middleware import LoggedIn
from .commands.user_commands import LoginCommand, RegisterCommand, ResetCommand, UsersCommand
from .commands.feed_commands import (
    AddFeedCommand,
    FeedsCommand,
    FollowCommand,
    UnfollowCommand,
    FollowingCommand,
)
from .commands.aggregate_commands import AggCommand, BrowseCommand
from .config.settings import GatorSettings, UserConfig, UserConfigStore
from .database.connection import DatabaseConnection
from .database.schema import DatabaseSchema
from .ingestion.feed_client import FeedClient
from .storage import UserRepository, FeedRepository, FeedFollowRepository, PostRepository
from .utils.logging import get_logger_for_component
from .utils.exceptions import DatabaseError, ErrorCode


logger = get_logger_for_component("app")


@dataclass
class AppState:
    """Everything a command handler may touch."""

    settings: GatorSettings
    user_config: UserConfig
    config_store: UserConfigStore
    db: DatabaseConnection
    users: UserRepository
    feeds: FeedRepository
    follows: FeedFollowRepository
    posts: PostRepository
    feed_client: FeedClient
    console: Console

    def close(self) -> None:
        self.feed_client.session.close()
        self.db.close_all_connections()


def open_database(db_path: str, pool_size: int = 2) -> DatabaseConnection:
    """Create the schema if needed and open a connection pool.

    Raises:
        DatabaseError: If the database cannot be created or is missing tables
    """
    schema = DatabaseSchema(db_path)
    try:
        schema.create_tables()
    except sqlite3.Error as e:
        raise DatabaseError(
            f"Cannot initialize database at {db_path}: {e}",
            error_code=ErrorCode.DATABASE_CONNECTION,
            user_message=f"Cannot open database {db_path}: {e}",
            recoverable=False,
        ) from e

    if not schema.verify_schema():
        raise DatabaseError(
            f"Database at {db_path} is missing tables",
            error_code=ErrorCode.DATABASE_SCHEMA,
            recoverable=False,
        )

    return DatabaseConnection(db_path, pool_size=pool_size)


def build_state(
    settings: GatorSettings,
    config_store: Optional[UserConfigStore] = None,
    console: Optional[Console] = None,
    session: Optional[requests.Session] = None,
) -> AppState:
    """Read the user config and wire up the application state.

    Args:
        settings: Process settings
        config_store: Config file access, defaults to ``settings.config_path``
        console: Output console, defaults to stdout
        session: HTTP session for the feed client

    Raises:
        ConfigurationError: If the config file is unreadable or malformed
        DatabaseError: If the database cannot be opened
    """
    config_store = config_store or UserConfigStore(settings.config_path)
    user_config = config_store.read()

    db_path = user_config.database_path(settings.database.default_path)
    logger.debug(f"Using database {db_path}")
    db = open_database(db_path, pool_size=settings.database.pool_size)

    return AppState(
        settings=settings,
        user_config=user_config,
        config_store=config_store,
        db=db,
        users=UserRepository(db),
        feeds=FeedRepository(db),
        follows=FeedFollowRepository(db),
        posts=PostRepository(db),
        feed_client=FeedClient(settings.fetch, session=session),
        console=console or Console(soft_wrap=True),
    )


def build_registry() -> CommandRegistry:
    """Register every command; user-scoped ones go through ``LoggedIn``."""
    registry = CommandRegistry()

    registry.register("login", LoginCommand())
    registry.register("register", RegisterCommand())
    registry.register("reset", ResetCommand())
    registry.register("users", UsersCommand())
    registry.register("agg", AggCommand())
    registry.register("feeds", FeedsCommand())

    registry.register("addfeed", LoggedIn(AddFeedCommand()))
    registry.register("follow", LoggedIn(FollowCommand()))
    registry.register("unfollow", LoggedIn(UnfollowCommand()))
    registry.register("following", LoggedIn(FollowingCommand()))
    registry.register("browse", LoggedIn(BrowseCommand()))

    return registry
