"""
Command Dispatch and Login Middleware Tests
===========================================
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from gator.commands.registry import (
    AuthenticatedCommandHandler,
    Command,
    CommandHandler,
    CommandRegistry,
)
from gator.commands.middleware import LoggedIn
from gator.config.settings import UserConfig
from gator.database.models import User
from gator.utils.exceptions import AuthenticationError, ResourceNotFoundError, UnknownCommandError


def handler_mock():
    return Mock(spec=CommandHandler)


class TestCommandRegistry:

    def test_routes_to_registered_handler(self):
        registry = CommandRegistry()
        login, users = handler_mock(), handler_mock()
        registry.register("login", login)
        registry.register("users", users)
        state = object()
        command = Command("login", ["alice"])

        registry.run(state, command)

        login.execute.assert_called_once_with(state, command)
        users.execute.assert_not_called()

    def test_unknown_command(self):
        registry = CommandRegistry()
        handler = handler_mock()
        registry.register("login", handler)

        with pytest.raises(UnknownCommandError) as exc_info:
            registry.run(object(), Command("frobnicate"))

        assert exc_info.value.command == "frobnicate"
        handler.execute.assert_not_called()

    def test_reregistering_replaces_handler(self):
        registry = CommandRegistry()
        old, new = handler_mock(), handler_mock()
        registry.register("feeds", old)
        registry.register("feeds", new)

        registry.run(object(), Command("feeds"))

        old.execute.assert_not_called()
        new.execute.assert_called_once()

    def test_handler_errors_propagate_unchanged(self):
        registry = CommandRegistry()
        handler = handler_mock()
        error = ResourceNotFoundError("User 'x' doesn't exist")
        handler.execute.side_effect = error
        registry.register("login", handler)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            registry.run(object(), Command("login", ["x"]))

        assert exc_info.value is error

    def test_names_and_membership(self):
        registry = CommandRegistry()
        registry.register("users", handler_mock())
        registry.register("agg", handler_mock())

        assert registry.names == ["agg", "users"]
        assert "users" in registry
        assert "browse" not in registry

    def test_handlers_must_implement_execute(self):
        class Incomplete(CommandHandler):
            pass

        with pytest.raises(TypeError):
            Incomplete()


class TestLoggedIn:

    @pytest.fixture
    def inner(self):
        return Mock(spec=AuthenticatedCommandHandler)

    def make_state(self, current_user_name, users=None):
        return SimpleNamespace(
            user_config=UserConfig(current_user_name=current_user_name),
            users=users or Mock(),
        )

    def test_calls_wrapped_handler_once_with_user(self, inner):
        alice = User(name="alice")
        users = Mock()
        users.get_user.return_value = alice
        state = self.make_state("alice", users)
        command = Command("following")

        LoggedIn(inner).execute(state, command)

        users.get_user.assert_called_once_with("alice")
        inner.execute.assert_called_once_with(state, command, alice)

    def test_no_current_user(self, inner):
        state = self.make_state("")

        with pytest.raises(AuthenticationError):
            LoggedIn(inner).execute(state, Command("browse"))

        inner.execute.assert_not_called()
        state.users.get_user.assert_not_called()

    def test_unknown_current_user(self, inner):
        users = Mock()
        users.get_user.side_effect = ResourceNotFoundError("User 'ghost' doesn't exist")
        state = self.make_state("ghost", users)

        with pytest.raises(AuthenticationError) as exc_info:
            LoggedIn(inner).execute(state, Command("follow", ["https://x.test/rss"]))

        assert "ghost" in exc_info.value.user_message
        assert isinstance(exc_info.value.__cause__, ResourceNotFoundError)
        inner.execute.assert_not_called()

    def test_wrapped_handler_errors_propagate(self, inner):
        users = Mock()
        users.get_user.return_value = User(name="alice")
        inner.execute.side_effect = ResourceNotFoundError("You are not following this feed")

        with pytest.raises(ResourceNotFoundError):
            LoggedIn(inner).execute(self.make_state("alice", users), Command("unfollow", ["u"]))
