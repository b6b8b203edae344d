"""
Gator Commands
==============

Command registry, authentication middleware and the command handlers.
"""

from .registry import Command, CommandHandler, AuthenticatedCommandHandler, CommandRegistry
from .middleware import LoggedIn

__all__ = [
    "Command",
    "CommandHandler",
    "AuthenticatedCommandHandler",
    "CommandRegistry",
    "LoggedIn",
]
