"""
Gator Custom Exceptions
=======================

Custom exception hierarchy for Gator with error codes, context information,
and user-friendly error messages.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"
    CONFIG_MISSING = "C002"
    CONFIG_PARSE_ERROR = "C003"
    CONFIG_WRITE_ERROR = "C004"

    # Database errors (D001-D099)
    DATABASE_CONNECTION = "D001"
    DATABASE_SCHEMA = "D002"
    DATABASE_CONSTRAINT = "D003"
    DATABASE_ERROR = "D006"

    # Feed ingestion errors (F001-F099)
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_READ_ERROR = "F007"
    FEED_NONE_AVAILABLE = "F008"

    # Command dispatch errors (K001-K099)
    COMMAND_UNKNOWN = "K001"
    COMMAND_USAGE = "K002"

    # Authentication errors (U001-U099)
    AUTH_FAILED = "U001"

    # Validation errors (V001-V099)
    VALIDATION_REQUIRED_FIELD = "V001"
    VALIDATION_INVALID_FORMAT = "V002"

    # Resource management errors (R001-R099)
    DUPLICATE_RESOURCE = "R001"
    RESOURCE_NOT_FOUND = "R002"


class GatorError(Exception):
    """Base exception for all Gator errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize Gator error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: User-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


def _passthrough(kwargs: Dict[str, Any], *consumed: str) -> Dict[str, Any]:
    return {k: v for k, v in kwargs.items() if k not in consumed}


class ConfigurationError(GatorError):
    """Configuration file and settings errors."""

    def __init__(self, message: str, config_path: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Args:
            message: Error message
            config_path: Configuration file that caused the error
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if config_path:
            context["config_path"] = config_path

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            **_passthrough(kwargs, "context", "error_code", "user_message"),
        )


class DatabaseError(GatorError):
    """Database-related errors."""

    def __init__(self, message: str, query: Optional[str] = None, **kwargs):
        """Initialize database error.

        Args:
            message: Error message
            query: SQL query that caused the error
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if query:
            context["query"] = query

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.DATABASE_ERROR),
            context=context,
            user_message=kwargs.get("user_message", "Database operation failed"),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


class DuplicateResourceError(DatabaseError):
    """Unique constraint violation.

    Raised when a record with the same unique key already exists. The
    ingestion pipeline treats it as "already stored" rather than a failure.
    """

    def __init__(self, message: str, resource: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if resource:
            context["resource"] = resource

        super().__init__(
            message,
            error_code=kwargs.pop("error_code", ErrorCode.DUPLICATE_RESOURCE),
            context=context,
            user_message=kwargs.pop("user_message", message),
            **kwargs,
        )


class ResourceNotFoundError(GatorError):
    """A requested user, feed or follow does not exist."""

    def __init__(self, message: str, resource: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if resource:
            context["resource"] = resource

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.RESOURCE_NOT_FOUND),
            context=context,
            user_message=kwargs.get("user_message", message),
            **_passthrough(kwargs, "context", "error_code", "user_message"),
        )


class FeedError(GatorError):
    """Feed ingestion and parsing errors."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            feed_url: Feed URL that caused the error
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if feed_url:
            context["feed_url"] = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_NETWORK_ERROR),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Feed processing failed: {message}"
            ),
            recoverable=kwargs.get("recoverable", True),
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


class FeedFetchError(FeedError):
    """HTTP request for a feed failed."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_NETWORK_ERROR)
        super().__init__(message, feed_url=feed_url, **kwargs)


class FeedReadError(FeedError):
    """Response body could not be read."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_READ_ERROR)
        super().__init__(message, feed_url=feed_url, **kwargs)


class FeedParseError(FeedError):
    """Response body is not a parseable feed document."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_PARSE_ERROR)
        super().__init__(message, feed_url=feed_url, **kwargs)


class NoFeedsAvailableError(FeedError):
    """There is no feed in the store to fetch."""

    def __init__(self, message: str = "No feeds available to fetch", **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_NONE_AVAILABLE)
        kwargs.setdefault("user_message", "No feeds to aggregate. Add one with 'addfeed <name> <url>'.")
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class CommandError(GatorError):
    """Command dispatch and invocation errors."""

    def __init__(self, message: str, command: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if command:
            context["command"] = command

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.COMMAND_USAGE),
            context=context,
            user_message=kwargs.get("user_message", message),
            **_passthrough(kwargs, "context", "error_code", "user_message"),
        )
        self.command = command


class UnknownCommandError(CommandError):
    """No handler is registered under the requested name."""

    def __init__(self, command: str, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.COMMAND_UNKNOWN)
        super().__init__(f"Unknown command: '{command}'", command=command, **kwargs)


class UsageError(CommandError):
    """Wrong argument count or shape for a command."""

    def __init__(self, message: str, command: Optional[str] = None, usage: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.COMMAND_USAGE)
        if usage:
            kwargs.setdefault("user_message", f"{message}\nUsage: {usage}")
        super().__init__(message, command=command, **kwargs)
        self.usage = usage


class AuthenticationError(GatorError):
    """Configured current user cannot be resolved."""

    def __init__(self, message: str, user_name: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if user_name:
            context["user_name"] = user_name

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.AUTH_FAILED),
            context=context,
            user_message=kwargs.get(
                "user_message",
                "You are not logged in. Run 'register <name>' or 'login <name>' first.",
            ),
            **_passthrough(kwargs, "context", "error_code", "user_message"),
        )


class ValidationError(GatorError):
    """Data validation errors."""

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        """Initialize validation error.

        Args:
            message: Error message
            field_name: Field name that failed validation
            **kwargs: Additional arguments for GatorError
        """
        context = kwargs.get("context", {})
        if field_name:
            context["field_name"] = field_name

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.VALIDATION_INVALID_FORMAT),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Invalid {field_name or 'input'}: {message}"
            ),
            recoverable=kwargs.get("recoverable", False),
            **_passthrough(kwargs, "context", "error_code", "user_message", "recoverable"),
        )


class InvalidDurationError(ValidationError):
    """Polling interval string is not a valid positive duration."""

    def __init__(self, value: str, reason: str = "expected a duration like 30s, 5m or 1h", **kwargs):
        super().__init__(f"'{value}': {reason}", field_name="interval", **kwargs)
        self.value = value


# Exception handling utilities


def get_user_friendly_message(exception: Exception) -> str:
    """Get user-friendly error message for any exception.

    Args:
        exception: Exception to get message for

    Returns:
        User-friendly error message
    """
    if isinstance(exception, GatorError):
        return exception.user_message

    # Fallback for non-Gator exceptions
    return f"An unexpected error occurred: {exception}"
