"""Org timestamp and duration helpers.

Org files use a handful of date forms:

- Active dates in planning lines: ``<2024-01-15 Mon>``, ``<2024-01-15 Mon 10:00>``
- Inactive clock/closed stamps: ``[2024-01-15 Mon 10:00]``

Only the text between the brackets is handled here; the brackets belong to
the line patterns in :mod:`org_outline.patterns`.
"""

import re
from datetime import datetime, time, timedelta
from typing import Optional

# Day names are written in English regardless of locale
WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

_DATE_RE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:\s+(?P<day>[^\W\d_]+\.?))?"
    r"(?:\s+(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?)?"
)


def _match_date(text: str) -> Optional[re.Match]:
    return _DATE_RE.fullmatch(text.strip())


def _build(match: re.Match) -> datetime:
    value = datetime.strptime(match.group("date"), "%Y-%m-%d")
    if match.group("hour") is not None:
        value = value.replace(
            hour=int(match.group("hour")),
            minute=int(match.group("minute")),
            second=int(match.group("second") or 0),
        )
    return value


def parse_org_date(text: str) -> datetime:
    """Parse a planning date such as ``2024-01-15 Mon 10:00``.

    Accepted forms are ``YYYY-MM-DD``, ``YYYY-MM-DD Day`` and
    ``YYYY-MM-DD Day HH:MM``. The day name is not checked against the date.

    Args:
        text: Date text without the surrounding ``<>``

    Returns:
        Parsed datetime (midnight when no time of day is given)

    Raises:
        ValueError: If the text is not one of the accepted forms
    """
    match = _match_date(text)
    if match is None or match.group("second") is not None:
        raise ValueError(f"unable to parse date: {text}")
    return _build(match)


def parse_clock_timestamp(text: str) -> datetime:
    """Parse a clock or closed stamp such as ``2024-01-15 Mon 10:00``.

    A time of day is required; seconds are optional.

    Raises:
        ValueError: If the text carries no time of day or is malformed
    """
    match = _match_date(text)
    if match is None or match.group("hour") is None:
        raise ValueError(f"unable to parse clock timestamp: {text}")
    return _build(match)


def format_org_date(value: datetime) -> str:
    """Format a planning date, e.g. ``2024-01-15 Mon``.

    The time of day is appended only when it is not midnight.
    """
    text = f"{value:%Y-%m-%d} {WEEKDAY_NAMES[value.weekday()]}"
    if value.time().replace(second=0, microsecond=0) != time(0, 0):
        text += f" {value:%H:%M}"
    return text


def format_clock_timestamp(value: datetime) -> str:
    """Format a clock stamp, e.g. ``2024-01-15 Mon 10:00``."""
    return f"{value:%Y-%m-%d} {WEEKDAY_NAMES[value.weekday()]} {value:%H:%M}"


def format_duration(duration: timedelta) -> str:
    """Format a duration as ``"2h 5m"``, or ``"5m"`` below one hour.

    Negative durations are shown as zero.
    """
    total_minutes = max(int(duration.total_seconds() // 60), 0)
    hours, minutes = divmod(total_minutes, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def parse_date_input(text: str, now: Optional[datetime] = None) -> datetime:
    """Parse a date typed by a user.

    Supports relative offsets (``+3`` means three days from now) and the
    absolute forms ``YYYY-MM-DD``, ``YYYY/MM/DD`` and ``MM/DD/YYYY``.

    Args:
        text: User input
        now: Reference time for relative offsets (defaults to the current time)

    Returns:
        Parsed datetime

    Raises:
        ValueError: If the input matches none of the supported forms
    """
    text = text.strip()
    if text.startswith("+"):
        try:
            days = int(text[1:])
        except ValueError:
            raise ValueError(f"invalid relative date format: {text}") from None
        return (now or datetime.now()) + timedelta(days=days)

    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y"):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    raise ValueError(f"unable to parse date: {text} (use YYYY-MM-DD or +N)")
