"""
User Commands
=============

Account commands that run without a logged-in user.

Commands:
- login <name>    - switch the current user
- register <name> - create a user and log in as them
- reset           - delete every user (cascades to all data)
- users           - list users, marking the current one
"""

from rich.markup import escape

from ..utils.logging import get_logger_for_component
from ..utils.validators import require_args
from .registry import Command, CommandHandler


logger = get_logger_for_component("user_commands")


class LoginCommand(CommandHandler):
    usage = "login <username>"

    def execute(self, state, command: Command) -> None:
        require_args(command.name, command.args, 1, self.usage)
        name = command.args[0]

        user = state.users.get_user(name)
        state.config_store.set_user(state.user_config, user.name)

        logger.info(f"Logged in as {user.name}")
        state.console.print(f"You are now logged in as: [bold]{escape(user.name)}[/bold]")


class RegisterCommand(CommandHandler):
    usage = "register <username>"

    def execute(self, state, command: Command) -> None:
        require_args(command.name, command.args, 1, self.usage)

        user = state.users.create_user(command.args[0])
        state.config_store.set_user(state.user_config, user.name)

        logger.info(f"Registered user {user.name} ({user.id})")
        state.console.print(f"[green]Successfully created user: {escape(user.name)}[/green]")


class ResetCommand(CommandHandler):
    """Deletes all users; feeds, follows and posts go with them."""

    usage = "reset"

    def execute(self, state, command: Command) -> None:
        require_args(command.name, command.args, 0, self.usage)

        deleted = state.users.reset_users()

        logger.warning(f"Reset store, deleted {deleted} user(s)")
        state.console.print("All tables successfully reset.")


class UsersCommand(CommandHandler):
    usage = "users"

    def execute(self, state, command: Command) -> None:
        require_args(command.name, command.args, 0, self.usage)

        users = state.users.list_users()
        if not users:
            state.console.print("There are currently no users.")
            return

        current = state.user_config.current_user_name
        for user in users:
            if user.name == current:
                state.console.print(f"* [bold]{escape(user.name)}[/bold] (current)")
            else:
                state.console.print(f"* {escape(user.name)}")
