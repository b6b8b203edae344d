"""
End-to-End Tests
================

Full command flows through the click CLI with a real SQLite database and
JSON config in a temporary directory. Only HTTP is mocked.
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests
from click.testing import CliRunner

from gator.cli import cli
from gator.config.settings import UserConfigStore
from gator.database.connection import DatabaseConnection
from gator.database.models import Post
from gator.ingestion.feed_client import FeedClient
from gator.processing.pipeline import IngestionPipeline
from gator.storage import FeedRepository, PostRepository


pytestmark = pytest.mark.integration


TWO_ITEM_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Blog</title>
    <link>http://x/</link>
    <description>A blog</description>
    <item>
      <title>Already Seen</title>
      <link>http://x/posts/old</link>
      <description>Stored by an earlier cycle</description>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Brand New</title>
      <link>http://x/posts/new</link>
      <description>Fresh &amp;amp; tasty</description>
      <pubDate>Tue, 02 Jan 2024 10:00:00 +0000</pubDate>
    </item>
  </channel>
</rss>
"""


def feed_response(content=TWO_ITEM_FEED):
    response = Mock()
    response.content = content
    response.headers = {"Content-Type": "application/rss+xml"}
    return response


@pytest.fixture
def workspace(tmp_path):
    """Config file pointing at a database in the temp directory."""
    config_path = tmp_path / "gatorconfig.json"
    db_path = tmp_path / "gator.db"
    config_path.write_text(json.dumps({"db_url": f"sqlite:///{db_path}", "current_user_name": ""}))
    return {"config": str(config_path), "db": str(db_path)}


@pytest.fixture
def gator(workspace):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, ["--config", workspace["config"], *args])

    return invoke


@pytest.fixture
def db(workspace):
    connection = DatabaseConnection(workspace["db"])
    yield connection
    connection.close_all_connections()


def post_urls(db):
    with db.get_connection() as conn:
        return sorted(row[0] for row in conn.execute("SELECT url FROM posts").fetchall())


class TestAliceScenario:
    """register -> addfeed -> one cycle with a duplicate item."""

    def test_one_new_post_and_feed_marked(self, gator, workspace, db, fixed_now):
        result = gator("register", "alice")
        assert result.exit_code == 0, result.output

        result = gator("addfeed", "Blog", "http://x/feed.xml")
        assert result.exit_code == 0, result.output
        assert "'alice' is now following the feed 'Blog'" in result.output

        feeds = FeedRepository(db)
        posts = PostRepository(db)
        feed = feeds.get_feed("http://x/feed.xml")
        posts.create_post(
            Post(title="Already Seen", url="http://x/posts/old", published_at=fixed_now, feed_id=feed.id)
        )

        pipeline = IngestionPipeline(feeds, posts, FeedClient(), clock=lambda: fixed_now)
        with patch("requests.Session.get", return_value=feed_response()):
            cycle = pipeline.run_cycle()

        assert cycle.posts_created == 1
        assert cycle.duplicates == 1
        assert post_urls(db) == ["http://x/posts/new", "http://x/posts/old"]
        assert feeds.get_feed_by_id(feed.id).last_fetched_at == fixed_now

        result = gator("browse", "2")
        assert result.exit_code == 0, result.output
        assert "Brand New" in result.output
        assert "Fresh & tasty" in result.output
        assert "Feed: Blog" in result.output

    def test_agg_ingests_then_stops_on_fetch_failure(self, gator, db):
        gator("register", "alice")
        gator("addfeed", "Blog", "http://x/feed.xml")

        responses = [feed_response(), requests.ConnectionError("connection refused")]
        with patch("requests.Session.get", side_effect=responses) as mock_get, \
                patch("gator.scheduler.feed_scheduler.signal.signal"):
            result = gator("agg", "10ms")

        assert result.exit_code == 1
        assert "Collecting feeds every 10ms" in result.output
        assert "Blog: 2 new" in result.output
        assert mock_get.call_count == 2
        assert post_urls(db) == ["http://x/posts/new", "http://x/posts/old"]


class TestCli:

    def test_no_command(self, gator):
        result = gator()

        assert result.exit_code == 1
        assert "no command argument provided" in result.output

    def test_unknown_command(self, gator):
        result = gator("frobnicate")

        assert result.exit_code == 1
        assert "Unknown command: 'frobnicate'" in result.output

    def test_wrong_argument_count(self, gator):
        result = gator("login")

        assert result.exit_code == 1
        assert "Usage: login <username>" in result.output

    def test_login_unknown_user(self, gator):
        result = gator("login", "ghost")

        assert result.exit_code == 1
        assert "User 'ghost' doesn't exist" in result.output

    def test_user_scoped_command_without_login(self, gator):
        result = gator("following")

        assert result.exit_code == 1
        assert "not logged in" in result.output

    def test_register_blank_name(self, gator):
        result = gator("register", "   ")

        assert result.exit_code == 1
        assert "Invalid name: User name cannot be empty" in result.output

    def test_browse_limit_too_large(self, gator):
        gator("register", "alice")

        result = gator("browse", "1000000000000000000000000000000")

        assert result.exit_code == 1
        assert "Limit must be between 1 and 1000" in result.output

    def test_register_persists_current_user(self, gator, workspace):
        result = gator("register", "alice")

        assert result.exit_code == 0
        saved = UserConfigStore(workspace["config"]).read()
        assert saved.current_user_name == "alice"
        assert saved.db_url.endswith("gator.db")

    def test_users_across_invocations(self, gator):
        gator("register", "alice")
        gator("register", "bob")

        result = gator("users")

        assert result.exit_code == 0
        assert "* alice" in result.output
        assert "* bob (current)" in result.output

    def test_reset_then_users(self, gator):
        gator("register", "alice")

        assert gator("reset").exit_code == 0
        result = gator("users")

        assert "There are currently no users." in result.output

    def test_invalid_interval(self, gator):
        result = gator("agg", "soon")

        assert result.exit_code == 1
        assert "soon" in result.output

    def test_malformed_config(self, gator, workspace):
        with open(workspace["config"], "w") as f:
            f.write("{broken")

        result = gator("users")

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_interrupt_exits_130(self, gator):
        registry = Mock()
        registry.run.side_effect = KeyboardInterrupt

        with patch("gator.cli.build_registry", return_value=registry):
            result = gator("users")

        assert result.exit_code == 130

    def test_unexpected_error(self, gator):
        registry = Mock()
        registry.run.side_effect = RuntimeError("kaboom")

        with patch("gator.cli.build_registry", return_value=registry):
            result = gator("users")

        assert result.exit_code == 1
        assert "An unexpected error occurred: kaboom" in result.output
