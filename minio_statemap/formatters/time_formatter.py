"""
Time formatting utilities for human-readable output.
"""

from datetime import datetime, timezone

from ..core.types import NANOS_PER_SECOND


def format_duration(ns: int) -> str:
    """
    Format a duration in nanoseconds to a human-readable string.

    Args:
        ns: Duration in nanoseconds

    Returns:
        Formatted time string (e.g., "123.45 ms", "2.34 s", "1m 30.50s")
    """
    ms = ns / 1_000_000.0
    if ms < 1000:
        return f"{ms:.2f} ms"
    elif ms < 60000:
        return f"{ms/1000:.2f} s"
    else:
        minutes = int(ms / 60000)
        seconds = (ms % 60000) / 1000
        return f"{minutes}m {seconds:.2f}s"


def format_timestamp_ns(ns: int) -> str:
    """
    Format nanoseconds since the Unix epoch as an RFC 3339 UTC timestamp.

    Args:
        ns: Absolute timestamp in nanoseconds

    Returns:
        Timestamp string with a nine digit fraction, e.g. "2020-03-05T18:51:23.358414062Z"
    """
    seconds, nanos = divmod(ns, NANOS_PER_SECOND)
    dt = datetime.fromtimestamp(seconds, timezone.utc)
    return f"{dt.strftime('%Y-%m-%dT%H:%M:%S')}.{nanos:09d}Z"
