"""
Gator Command Line Interface
============================

Entry point: ``gator [--config PATH] [--debug] <command> [args...]``.

Exit codes: 0 on success, 1 on any error, 130 when interrupted.
"""

import sys

import click
from rich.console import Console
from rich.markup import escape

from .app import build_registry, build_state
from .commands.registry import Command
from .config.settings import load_settings
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import GatorError, get_user_friendly_message


EXIT_ERROR = 1
EXIT_INTERRUPTED = 130

error_console = Console(stderr=True, soft_wrap=True)
logger = get_logger_for_component("cli")


def _fail(error: Exception) -> None:
    error_console.print(f"[bold red]Error:[/bold red] {escape(get_user_friendly_message(error))}", highlight=False)
    sys.exit(EXIT_ERROR)


@click.command(
    context_settings={"ignore_unknown_options": True, "help_option_names": ["-h", "--help"]}
)
@click.option("--config", "-c", "config_path", help="Path to the JSON user config file")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.argument("command", required=False)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def cli(config_path, debug, command, args):
    """Gator - a command-line RSS aggregator.

    \b
    Commands:
      register <name>       create a user and log in
      login <name>          switch the current user
      users                 list users
      reset                 delete all users and their data
      addfeed <name> <url>  add a feed and follow it
      feeds                 list all feeds
      follow <url>          follow an existing feed
      unfollow <url>        stop following a feed
      following             list followed feeds
      agg <interval>        fetch feeds every interval (e.g. 30s, 1m)
      browse [limit]        show the newest posts from followed feeds
    """
    if not command:
        error_console.print("[bold red]Error:[/bold red] no command argument provided.")
        sys.exit(EXIT_ERROR)

    overrides = {}
    if config_path:
        overrides["config_path"] = config_path
    if debug:
        overrides["debug"] = True

    state = None
    try:
        settings = load_settings(**overrides)
        configure_application_logging(
            log_level=settings.get_effective_log_level(),
            log_file=settings.logging.file_path,
            enable_console=settings.logging.console_logging,
            structured_logging=settings.logging.structured_logging,
            max_file_size_mb=settings.logging.max_file_size_mb,
            backup_count=settings.logging.backup_count,
        )

        state = build_state(settings)
        build_registry().run(state, Command(name=command, args=list(args)))

    except KeyboardInterrupt:
        error_console.print("\nInterrupted.")
        sys.exit(EXIT_INTERRUPTED)
    except GatorError as e:
        logger.debug(f"Command '{command}' failed: {e}", extra=e.to_dict())
        _fail(e)
    except Exception as e:
        logger.error(f"Unexpected error in '{command}': {e}", exc_info=True)
        _fail(e)
    finally:
        if state is not None:
            state.close()


def main():
    """Console script entry point."""
    cli(prog_name="gator")


if __name__ == "__main__":
    main()
