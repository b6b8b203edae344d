"""
Command Registry
================

Maps command names to handler objects and dispatches invocations.

Handlers implement one of two interfaces: ``CommandHandler`` for commands
that need no user, and ``AuthenticatedCommandHandler`` for commands that act
on behalf of the logged-in user. The latter are registered through the
``LoggedIn`` adapter from :mod:`gator.commands.middleware`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..database.models import User
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import UnknownCommandError


@dataclass
class Command:
    """A named invocation with its positional arguments."""

    name: str
    args: List[str] = field(default_factory=list)


class CommandHandler(ABC):
    """Handler for a command that runs without a user."""

    @abstractmethod
    def execute(self, state: Any, command: Command) -> None:
        """Run the command against the application state."""


class AuthenticatedCommandHandler(ABC):
    """Handler for a command that runs as the current user."""

    @abstractmethod
    def execute(self, state: Any, command: Command, user: User) -> None:
        """Run the command as ``user``."""


class CommandRegistry:
    """Name to handler mapping with single dispatch."""

    def __init__(self):
        self._handlers: Dict[str, CommandHandler] = {}
        self.logger = get_logger_for_component("commands")

    def register(self, name: str, handler: CommandHandler) -> None:
        """Register ``handler`` under ``name``, replacing any previous one."""
        if name in self._handlers:
            self.logger.debug(f"Replacing handler for '{name}'")
        self._handlers[name] = handler

    def run(self, state: Any, command: Command) -> None:
        """Dispatch ``command`` to its handler.

        Raises:
            UnknownCommandError: If no handler is registered for the name

        Handler exceptions propagate unchanged.
        """
        handler = self._handlers.get(command.name)
        if handler is None:
            raise UnknownCommandError(command.name)

        self.logger.debug(f"Running '{command.name}' with {len(command.args)} argument(s)")
        handler.execute(state, command)

    @property
    def names(self) -> List[str]:
        return sorted(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers
