"""
Publish Date Normalization
==========================

Feeds put almost anything in ``pubDate``. Dates are tried against an ordered
table of formats and the first match wins; an unparseable date falls back to
the current time so one bad item never aborts ingestion of a feed.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

from ..utils.logging import get_logger_for_component

logger = get_logger_for_component("timestamps")


# RFC 822 section 5 zone names; any other alphabetic zone is read as UTC
ZONE_OFFSETS = {
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
}

_ZONE_NAME = re.compile(r"^[A-Za-z]{1,5}$")


def _zone_from_name(name: str) -> timezone:
    if not _ZONE_NAME.match(name):
        raise ValueError(f"not a zone abbreviation: {name!r}")
    hours = ZONE_OFFSETS.get(name.upper(), 0)
    if hours == 0:
        return timezone.utc
    return timezone(timedelta(hours=hours), name.upper())


@dataclass(frozen=True)
class TimestampFormat:
    """One accepted layout.

    ``pattern`` is a strptime pattern. When ``named_zone`` is set the value
    ends in a zone abbreviation (``GMT``, ``EST``) that strptime cannot read
    portably, so it is split off and resolved through ZONE_OFFSETS.
    """

    name: str
    pattern: str
    named_zone: bool = False

    def parse(self, value: str) -> datetime:
        """Parse ``value`` or raise ValueError."""
        if not self.named_zone:
            parsed = datetime.strptime(value, self.pattern)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed

        text, _, zone = value.rpartition(" ")
        if not text:
            raise ValueError(f"missing zone in {value!r}")
        return datetime.strptime(text, self.pattern).replace(tzinfo=_zone_from_name(zone))


TIMESTAMP_FORMATS: Sequence[TimestampFormat] = (
    TimestampFormat("RFC1123", "%a, %d %b %Y %H:%M:%S", named_zone=True),
    TimestampFormat("RFC3339", "%Y-%m-%dT%H:%M:%S%z"),
    TimestampFormat("RFC3339Nano", "%Y-%m-%dT%H:%M:%S.%f%z"),
    TimestampFormat("RFC850", "%A, %d-%b-%y %H:%M:%S", named_zone=True),
    TimestampFormat("RFC1123Z", "%a, %d %b %Y %H:%M:%S %z"),
    TimestampFormat("RFC822Z", "%d %b %y %H:%M %z"),
)


def parse_timestamp(
    value: Optional[str],
    formats: Sequence[TimestampFormat] = TIMESTAMP_FORMATS,
) -> Optional[datetime]:
    """Parse ``value`` with the first matching format.

    Returns:
        An aware datetime, or None if no format matches
    """
    text = (value or "").strip()
    if not text:
        return None

    for fmt in formats:
        try:
            return fmt.parse(text)
        except ValueError:
            continue
    return None


def normalize_timestamp(
    value: Optional[str],
    now: Optional[Callable[[], datetime]] = None,
    formats: Sequence[TimestampFormat] = TIMESTAMP_FORMATS,
) -> datetime:
    """Convert a free-form publish date into an aware datetime.

    Args:
        value: Raw date string from the feed
        now: Clock used for the fallback, defaults to UTC wall-clock time
        formats: Accepted formats in priority order

    Returns:
        The parsed instant, or the current time if nothing matches
    """
    parsed = parse_timestamp(value, formats)
    if parsed is not None:
        return parsed

    logger.warning(f"Could not parse publish date {value!r}, using current time")
    return now() if now else datetime.now(timezone.utc)
