"""
PyTest Configuration and Fixtures
=================================

Shared fixtures and configuration for Gator tests.

Every test gets its own SQLite file under pytest's ``tmp_path``, so tests
never share rows and can run in any order.
"""

import io
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Set test environment variables before any imports
os.environ["GATOR_LOGGING__LEVEL"] = "DEBUG"
os.environ["GATOR_LOGGING__CONSOLE_LOGGING"] = "false"


# ============================================================================
# Logging
# ============================================================================


@pytest.fixture(autouse=True)
def reset_gator_logger():
    """Drop handlers the CLI installs so they never outlive a test's streams."""
    yield
    logger = logging.getLogger("gator")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def db_path(tmp_path):
    """Path to a fresh database with the schema created."""
    from gator.database.schema import DatabaseSchema

    path = tmp_path / "gator_test.db"
    DatabaseSchema(str(path)).create_tables()
    return str(path)


@pytest.fixture
def db_connection(db_path):
    """Create a database connection manager for testing."""
    from gator.database.connection import DatabaseConnection

    connection = DatabaseConnection(db_path, pool_size=2)
    yield connection

    # Cleanup connections
    connection.close_all_connections()


@pytest.fixture
def user_repo(db_connection):
    from gator.storage import UserRepository

    return UserRepository(db_connection)


@pytest.fixture
def feed_repo(db_connection):
    from gator.storage import FeedRepository

    return FeedRepository(db_connection)


@pytest.fixture
def follow_repo(db_connection):
    from gator.storage import FeedFollowRepository

    return FeedFollowRepository(db_connection)


@pytest.fixture
def post_repo(db_connection):
    from gator.storage import PostRepository

    return PostRepository(db_connection)


# ============================================================================
# Sample Data
# ============================================================================


@pytest.fixture
def sample_user(user_repo):
    return user_repo.create_user("alice")


@pytest.fixture
def sample_feed(feed_repo, sample_user):
    return feed_repo.create_feed("Example Blog", "https://example.com/feed.xml", sample_user.id)


@pytest.fixture
def fixed_now():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Blog</title>
    <link>https://example.com/</link>
    <description>Posts about examples &amp;amp; testing</description>
    <item>
      <title>First Post</title>
      <link>https://example.com/posts/1</link>
      <description>The first post</description>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Post</title>
      <link>https://example.com/posts/2</link>
      <description>The second post</description>
      <pubDate>Tue, 02 Jan 2024 10:00:00 +0000</pubDate>
    </item>
  </channel>
</rss>
"""


@pytest.fixture
def sample_rss():
    """A two-item RSS 2.0 document."""
    return SAMPLE_RSS


# ============================================================================
# Application State
# ============================================================================


@pytest.fixture
def settings(tmp_path):
    from gator.config.settings import GatorSettings

    return GatorSettings(
        config_path=str(tmp_path / "gatorconfig.json"),
        database={"default_path": str(tmp_path / "gator_app.db")},
    )


@pytest.fixture
def config_store(settings):
    from gator.config.settings import UserConfigStore

    return UserConfigStore(settings.config_path)


@pytest.fixture
def app_state(settings, config_store):
    """Application state writing command output to an in-memory console."""
    from rich.console import Console
    from gator.app import build_state

    console = Console(file=io.StringIO(), soft_wrap=True, width=200, color_system=None)
    state = build_state(settings, config_store=config_store, console=console)
    yield state
    state.close()


@pytest.fixture
def output(app_state):
    """Return everything printed to the state's console so far."""
    return lambda: app_state.console.file.getvalue()
