"""
Repository Tests
================

Users, feeds, follows and posts over a real SQLite database.
"""

from datetime import datetime, timedelta, timezone

import pytest

from gator.database.models import Post
from gator.utils.exceptions import (
    DatabaseError,
    DuplicateResourceError,
    NoFeedsAvailableError,
    ResourceNotFoundError,
    ValidationError,
)


def make_post(feed_id, url, published_at, title="Post"):
    return Post(title=title, url=url, description="desc", published_at=published_at, feed_id=feed_id)


class TestUserRepository:

    def test_create_and_get(self, user_repo):
        created = user_repo.create_user("alice")
        fetched = user_repo.get_user("alice")

        assert fetched.id == created.id
        assert fetched.name == "alice"
        assert fetched.created_at.tzinfo is not None

    def test_duplicate_name(self, user_repo):
        user_repo.create_user("alice")

        with pytest.raises(DuplicateResourceError):
            user_repo.create_user("alice")

    def test_blank_name_rejected(self, user_repo):
        with pytest.raises(ValidationError) as exc_info:
            user_repo.create_user("   ")

        assert exc_info.value.context["field_name"] == "name"
        assert "cannot be empty" in exc_info.value.user_message
        assert user_repo.list_users() == []

    def test_get_missing_user(self, user_repo):
        with pytest.raises(ResourceNotFoundError) as exc_info:
            user_repo.get_user("nobody")
        assert "nobody" in exc_info.value.user_message

    def test_list_users_sorted(self, user_repo):
        for name in ("carol", "alice", "bob"):
            user_repo.create_user(name)

        assert [u.name for u in user_repo.list_users()] == ["alice", "bob", "carol"]

    def test_reset_cascades(self, user_repo, feed_repo, follow_repo, post_repo, sample_feed, sample_user, fixed_now):
        follow_repo.create_feed_follow(sample_user.id, sample_feed.id)
        post_repo.create_post(make_post(sample_feed.id, "https://example.com/p/1", fixed_now))

        assert user_repo.reset_users() == 1

        assert user_repo.list_users() == []
        assert feed_repo.list_feeds() == []
        with post_repo.db.get_connection() as conn:
            assert conn.execute("SELECT COUNT(*) FROM posts").fetchone()[0] == 0
            assert conn.execute("SELECT COUNT(*) FROM feed_follows").fetchone()[0] == 0


class TestFeedRepository:

    def test_create_and_get_by_url(self, feed_repo, sample_user):
        feed = feed_repo.create_feed("Blog", "https://blog.test/rss", sample_user.id)

        fetched = feed_repo.get_feed("https://blog.test/rss")

        assert fetched.id == feed.id
        assert fetched.last_fetched_at is None
        assert feed_repo.get_feed_by_id(feed.id).url == "https://blog.test/rss"

    def test_duplicate_url(self, feed_repo, sample_feed, sample_user):
        with pytest.raises(DuplicateResourceError):
            feed_repo.create_feed("Again", sample_feed.url, sample_user.id)

    def test_missing_feed(self, feed_repo):
        with pytest.raises(ResourceNotFoundError):
            feed_repo.get_feed("https://missing.test/rss")
        with pytest.raises(ResourceNotFoundError):
            feed_repo.get_feed_by_id("missing")

    def test_unknown_owner_rejected(self, feed_repo):
        with pytest.raises(DatabaseError) as exc_info:
            feed_repo.create_feed("Orphan", "https://orphan.test/rss", "no-such-user")

        assert not isinstance(exc_info.value, DuplicateResourceError)

    def test_list_feeds_includes_creator(self, feed_repo, sample_feed):
        feeds = feed_repo.list_feeds()

        assert len(feeds) == 1
        assert feeds[0].user_name == "alice"

    def test_next_feed_without_feeds(self, feed_repo):
        with pytest.raises(NoFeedsAvailableError):
            feed_repo.get_next_feed_to_fetch()

    def test_next_feed_prefers_never_fetched_then_oldest(self, feed_repo, sample_user, fixed_now):
        a = feed_repo.create_feed("A", "https://a.test/rss", sample_user.id)
        b = feed_repo.create_feed("B", "https://b.test/rss", sample_user.id)
        c = feed_repo.create_feed("C", "https://c.test/rss", sample_user.id)

        feed_repo.mark_feed_fetched(a.id, fixed_now)
        feed_repo.mark_feed_fetched(b.id, fixed_now - timedelta(hours=1))
        assert feed_repo.get_next_feed_to_fetch().id == c.id

        feed_repo.mark_feed_fetched(c.id, fixed_now + timedelta(hours=1))
        assert feed_repo.get_next_feed_to_fetch().id == b.id

    def test_mark_feed_fetched(self, feed_repo, sample_feed, fixed_now):
        feed_repo.mark_feed_fetched(sample_feed.id, fixed_now)

        assert feed_repo.get_feed_by_id(sample_feed.id).last_fetched_at == fixed_now

    def test_mark_missing_feed(self, feed_repo, fixed_now):
        with pytest.raises(ResourceNotFoundError):
            feed_repo.mark_feed_fetched("missing", fixed_now)


class TestFeedFollowRepository:

    def test_create_returns_names(self, follow_repo, sample_user, sample_feed):
        follow = follow_repo.create_feed_follow(sample_user.id, sample_feed.id)

        assert follow.user_name == "alice"
        assert follow.feed_name == "Example Blog"

    def test_duplicate_follow(self, follow_repo, sample_user, sample_feed):
        follow_repo.create_feed_follow(sample_user.id, sample_feed.id)

        with pytest.raises(DuplicateResourceError):
            follow_repo.create_feed_follow(sample_user.id, sample_feed.id)

    def test_follows_for_user_sorted_by_feed_name(self, follow_repo, feed_repo, user_repo, sample_user):
        bob = user_repo.create_user("bob")
        zeta = feed_repo.create_feed("Zeta", "https://z.test/rss", bob.id)
        alpha = feed_repo.create_feed("Alpha", "https://a.test/rss", bob.id)
        follow_repo.create_feed_follow(sample_user.id, zeta.id)
        follow_repo.create_feed_follow(sample_user.id, alpha.id)

        names = [f.feed_name for f in follow_repo.get_feed_follows_for_user(sample_user.id)]

        assert names == ["Alpha", "Zeta"]
        assert follow_repo.get_feed_follows_for_user(bob.id) == []

    def test_delete_follow(self, follow_repo, sample_user, sample_feed):
        follow_repo.create_feed_follow(sample_user.id, sample_feed.id)

        follow_repo.delete_feed_follow(sample_user.id, sample_feed.id)

        assert follow_repo.get_feed_follows_for_user(sample_user.id) == []

    def test_delete_missing_follow(self, follow_repo, sample_user, sample_feed):
        with pytest.raises(ResourceNotFoundError):
            follow_repo.delete_feed_follow(sample_user.id, sample_feed.id)


class TestPostRepository:

    def test_duplicate_url_detected(self, post_repo, sample_feed, fixed_now):
        post_repo.create_post(make_post(sample_feed.id, "https://example.com/p/1", fixed_now))

        with pytest.raises(DuplicateResourceError):
            post_repo.create_post(make_post(sample_feed.id, "https://example.com/p/1", fixed_now))

    def test_unknown_feed_is_not_a_duplicate(self, post_repo, fixed_now):
        with pytest.raises(DatabaseError) as exc_info:
            post_repo.create_post(make_post("no-such-feed", "https://example.com/p/1", fixed_now))

        assert not isinstance(exc_info.value, DuplicateResourceError)

    def test_posts_for_user_newest_first_and_limited(
        self, post_repo, follow_repo, sample_user, sample_feed, fixed_now
    ):
        follow_repo.create_feed_follow(sample_user.id, sample_feed.id)
        for i in range(4):
            post_repo.create_post(
                make_post(sample_feed.id, f"https://example.com/p/{i}", fixed_now + timedelta(hours=i), title=f"P{i}")
            )

        posts = post_repo.get_posts_for_user(sample_user.id, limit=2)

        assert [p.title for p in posts] == ["P3", "P2"]
        assert posts[0].feed_name == "Example Blog"
        assert posts[0].published_at == fixed_now + timedelta(hours=3)

    def test_posts_only_from_followed_feeds(
        self, post_repo, follow_repo, feed_repo, sample_user, sample_feed, fixed_now
    ):
        other = feed_repo.create_feed("Other", "https://other.test/rss", sample_user.id)
        follow_repo.create_feed_follow(sample_user.id, sample_feed.id)
        post_repo.create_post(make_post(sample_feed.id, "https://example.com/p/1", fixed_now, title="mine"))
        post_repo.create_post(make_post(other.id, "https://other.test/p/1", fixed_now, title="theirs"))

        posts = post_repo.get_posts_for_user(sample_user.id, limit=10)

        assert [p.title for p in posts] == ["mine"]

    def test_published_at_stored_in_utc(self, post_repo, follow_repo, sample_user, sample_feed):
        follow_repo.create_feed_follow(sample_user.id, sample_feed.id)
        eastern = timezone(timedelta(hours=-5))
        post_repo.create_post(make_post(sample_feed.id, "https://example.com/p/1", datetime(2024, 1, 1, 7, tzinfo=eastern)))

        [post] = post_repo.get_posts_for_user(sample_user.id)

        assert post.published_at == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
