"""
Record normalizer: MinIO trace records to Operations.
"""

import calendar
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Iterator, Optional

from ..core.exceptions import TraceFormatError
from ..core.types import (
    NANOS_PER_SECOND,
    RECORD_API,
    RECORD_CALL_STATS,
    RECORD_DURATION,
    RECORD_HOST,
    RECORD_TIME,
    Operation,
)

RFC3339_PATTERN = re.compile(
    r'^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})'
    r'(?:\.(\d+))?'
    r'([Zz]|[+-]\d{2}:\d{2})$'
)


def parse_timestamp_ns(value: str) -> int:
    """
    Convert an RFC 3339 timestamp to integer nanoseconds since the Unix epoch.

    The sub-second part is kept exactly; no floating point is involved.

    Args:
        value: Timestamp such as "2020-03-05T18:51:23.358414062Z"

    Returns:
        Nanoseconds since 1970-01-01T00:00:00Z

    Raises:
        ValueError: If the timestamp cannot be parsed
    """
    match = RFC3339_PATTERN.match(value)
    if not match:
        raise ValueError(f"unparsable timestamp {value!r}")

    year, month, day, hour, minute, second = (int(g) for g in match.group(1, 2, 3, 4, 5, 6))
    fraction = match.group(7) or ''
    if len(fraction) > 9:
        raise ValueError(f"timestamp {value!r} is more precise than nanoseconds")

    zone = match.group(8)
    if zone in ('Z', 'z'):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == '-' else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)

    # datetime validates the calendar fields (month 13, Feb 30, ...)
    dt = datetime(year, month, day, hour, minute, second, tzinfo=tz)
    try:
        seconds = calendar.timegm(dt.utctimetuple())
    except OverflowError as e:
        raise ValueError(f"timestamp {value!r} is out of range in UTC") from e
    nanos = int(fraction.ljust(9, '0')) if fraction else 0
    return seconds * NANOS_PER_SECOND + nanos


class RecordNormalizer:
    """Converts raw MinIO trace records into Operations."""

    @staticmethod
    def _required_string(record: Dict, key: str, index: Optional[int]) -> str:
        value = record.get(key)
        if value is None:
            raise TraceFormatError(f"missing required field '{key}'", index)
        if not isinstance(value, str) or not value:
            raise TraceFormatError(f"field '{key}' must be a non-empty string", index)
        return value

    def normalize(self, record: Dict, index: Optional[int] = None) -> Operation:
        """
        Normalize a single trace record.

        MinIO reports the end time and duration of each operation, never its
        start time, so the start is inferred as end - duration.

        Args:
            record: Decoded trace record
            index: Position of the record in the trace, used in error messages

        Returns:
            Operation with absolute start/end nanosecond timestamps

        Raises:
            TraceFormatError: If the record is malformed
        """
        if not isinstance(record, dict):
            raise TraceFormatError("record is not a JSON object", index)

        entity = self._required_string(record, RECORD_HOST, index)
        kind = self._required_string(record, RECORD_API, index)
        timestamp = self._required_string(record, RECORD_TIME, index)

        call_stats = record.get(RECORD_CALL_STATS)
        if not isinstance(call_stats, dict) or RECORD_DURATION not in call_stats:
            raise TraceFormatError(
                f"missing required field '{RECORD_CALL_STATS}.{RECORD_DURATION}'", index
            )

        duration_ns = call_stats[RECORD_DURATION]
        # bool is an int subclass; floats and Decimals are not whole nanoseconds
        if isinstance(duration_ns, bool) or not isinstance(duration_ns, int):
            raise TraceFormatError(f"duration {duration_ns!r} is not an integer", index)
        if duration_ns < 0:
            raise TraceFormatError(f"negative duration {duration_ns}", index)

        try:
            end_time_ns = parse_timestamp_ns(timestamp)
        except ValueError as e:
            raise TraceFormatError(str(e), index) from e

        if end_time_ns < 0:
            raise TraceFormatError(f"timestamp {timestamp!r} predates the Unix epoch", index)

        start_time_ns = end_time_ns - duration_ns
        if start_time_ns < 0:
            raise TraceFormatError(
                f"duration {duration_ns} places the start of {kind} before the Unix epoch",
                index
            )

        return Operation(
            entity=entity,
            kind=kind,
            start_time_ns=start_time_ns,
            end_time_ns=end_time_ns
        )

    def normalize_all(self, records: Iterable[Dict]) -> Iterator[Operation]:
        """
        Lazily normalize a stream of records, numbering them from 0.

        Args:
            records: Iterable of decoded trace records

        Yields:
            One Operation per record
        """
        for index, record in enumerate(records):
            yield self.normalize(record, index)
