"""Time parsing and formatting utilities for taskman."""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional


# RFC 3339 fractional seconds may have any number of digits; datetime keeps
# exactly six.
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as an RFC 3339 UTC timestamp.

    Example: "2024-03-01T09:30:00.123456Z"

    Args:
        moment: Timezone-aware datetime

    Returns:
        Timestamp string with a "Z" suffix
    """
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(text: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware UTC datetime.

    Accepts a "Z" or numeric offset and fractional seconds of any precision
    (truncated to microseconds).

    Args:
        text: Timestamp string

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If the text is not a timestamp or has no UTC offset
    """
    normalized = text.strip()
    if normalized.endswith(("Z", "z")):
        normalized = normalized[:-1] + "+00:00"
    normalized = _FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized)

    moment = datetime.fromisoformat(normalized)
    if moment.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {text!r}")
    return moment.astimezone(timezone.utc)


def format_local(moment: datetime, fmt: str) -> str:
    """Format an aware datetime in the local timezone."""
    return moment.astimezone().strftime(fmt)


def format_clock(duration: timedelta) -> str:
    """
    Format a duration as minutes and seconds ("M:SS").

    Minutes are not wrapped into hours, so 90 minutes renders as "90:00".
    """
    total = max(0, int(duration.total_seconds()))
    return f"{total // 60}:{total % 60:02d}"


def format_hms(duration: timedelta) -> str:
    """Format a duration as "HH:MM:SS"."""
    total = max(0, int(duration.total_seconds()))
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_time_string(time_str: str) -> Optional[int]:
    """
    Parse a time string into seconds.

    Supports formats:
    - Plain number: "30" -> 30 minutes -> 1800 seconds
    - Seconds: "90s" or "90sec" -> 90 seconds
    - Minutes: "30m" or "30min" -> 1800 seconds
    - Hours: "2h" -> 7200 seconds
    - Combined: "1h30m15s" -> 5415 seconds
    - Decimal: "1.5h" -> 5400 seconds, "2.5m" -> 150 seconds

    Args:
        time_str: Time string to parse

    Returns:
        Number of seconds, or None if parse fails
    """
    time_str = time_str.strip().lower()
    if not time_str:
        return None

    # Plain number means minutes
    try:
        return int(time_str) * 60
    except ValueError:
        pass

    pattern = r'(?:(\d+(?:\.\d+)?)(?:h|hr|hour|hours))?\s*(?:(\d+(?:\.\d+)?)(?:m|min|minutes?))?\s*(?:(\d+(?:\.\d+)?)(?:s|sec|seconds?))?$'
    match = re.match(pattern, time_str)

    if match:
        hours_str, minutes_str, seconds_str = match.groups()
        total_seconds = 0.0

        if hours_str:
            total_seconds += float(hours_str) * 3600
        if minutes_str:
            total_seconds += float(minutes_str) * 60
        if seconds_str:
            total_seconds += float(seconds_str)

        if total_seconds > 0:
            return int(total_seconds)

    return None


def format_time(seconds: int) -> str:
    """
    Format seconds into a compact human-readable string.

    Returns format like "1h30m", "45m" or "30s".

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string
    """
    if seconds < 60:
        return f"{seconds}s"

    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0:
        parts.append(f"{secs}s")

    return "".join(parts)
