"""
Authentication middleware for user-scoped commands.
"""

from ..utils.logging import get_logger_for_component
from ..utils.exceptions import AuthenticationError, ResourceNotFoundError
from .registry import AuthenticatedCommandHandler, Command, CommandHandler


class LoggedIn(CommandHandler):
    """Adapts an ``AuthenticatedCommandHandler`` into a plain handler.

    Resolves the configured current user before every call. The wrapped
    handler runs exactly once with the resolved user, or not at all when no
    user is logged in or the configured user no longer exists.
    """

    def __init__(self, handler: AuthenticatedCommandHandler):
        self.handler = handler
        self.logger = get_logger_for_component("auth")

    def execute(self, state, command: Command) -> None:
        user_name = state.user_config.current_user_name
        if not user_name:
            raise AuthenticationError(f"No current user set for '{command.name}'")

        try:
            user = state.users.get_user(user_name)
        except ResourceNotFoundError as e:
            raise AuthenticationError(
                f"Current user '{user_name}' does not exist",
                user_name=user_name,
                user_message=f"Logged-in user '{user_name}' doesn't exist. Run 'register <name>' or 'login <name>'.",
            ) from e

        self.logger.debug(f"Running '{command.name}' as {user_name}")
        self.handler.execute(state, command, user)
