"""
Gator Input Validators
======================

Validation helpers for command arguments, polling intervals and feed URLs.
"""

import re
from datetime import timedelta
from typing import List, Optional
from urllib.parse import urlparse

from .exceptions import InvalidDurationError, UsageError, ValidationError, ErrorCode


# Go-style duration units, in seconds
DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> timedelta:
    """Parse a duration string such as ``30s``, ``1h30m`` or ``1.5h``.

    Accepts a sequence of decimal numbers, each with a unit suffix. The
    result must be positive: a polling interval of zero would spin.

    Raises:
        InvalidDurationError: If the string is malformed or not positive
    """
    if not value or not isinstance(value, str):
        raise InvalidDurationError(str(value), "duration is required")

    text = value.strip()
    if text.startswith("+"):
        text = text[1:]
    if text.startswith("-"):
        raise InvalidDurationError(value, "duration must be positive")

    total = 0.0
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if not match:
            raise InvalidDurationError(value)
        number, unit = match.groups()
        total += float(number) * DURATION_UNITS[unit]
        position = match.end()

    if position == 0 or total <= 0:
        raise InvalidDurationError(value, "duration must be positive")

    return timedelta(seconds=total)


def format_duration(interval: timedelta) -> str:
    """Render a timedelta in the compact ``1h2m3s`` form."""
    total = interval.total_seconds()
    if total < 1:
        return f"{total * 1000:g}ms"

    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    parts = []
    if hours:
        parts.append(f"{int(hours)}h")
    if hours or minutes:
        parts.append(f"{int(minutes)}m")
    parts.append(f"{seconds:g}s")
    return "".join(parts)


def require_args(
    command: str,
    args: List[str],
    count: int,
    usage: str,
    maximum: Optional[int] = None,
) -> None:
    """Check a command received the expected number of arguments.

    Args:
        command: Command name for the error message
        args: Arguments received
        count: Minimum (or exact, if ``maximum`` is None) argument count
        usage: Usage line shown to the user
        maximum: Upper bound for commands with optional arguments

    Raises:
        UsageError: If the argument count is wrong
    """
    upper = count if maximum is None else maximum
    if count <= len(args) <= upper:
        return

    if count == upper:
        expected = f"{count} argument{'s' if count != 1 else ''}"
    else:
        expected = f"{count} to {upper} arguments"

    raise UsageError(
        f"'{command}' expects {expected}, got {len(args)}",
        command=command,
        usage=usage,
    )


def validate_feed_url(url: str) -> str:
    """Validate a feed URL before it is stored.

    Raises:
        ValidationError: If the URL is not an absolute http(s) URL
    """
    url = (url or "").strip()
    if not url:
        raise ValidationError(
            "URL is required",
            field_name="url",
            error_code=ErrorCode.VALIDATION_REQUIRED_FIELD,
        )

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise ValidationError(
            f"'{url}' is not an http(s) URL",
            field_name="url",
        )

    return url
