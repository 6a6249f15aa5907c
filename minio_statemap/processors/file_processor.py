"""
MinIO trace file reading using streaming parser.
"""

import logging
from typing import BinaryIO, Dict, Iterator

import ijson

from ..core.exceptions import TraceFormatError

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 10_000


class _ContentTrackingReader:
    """Binary stream wrapper noting whether anything besides whitespace was read."""

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self.has_content = False

    def read(self, size: int = -1) -> bytes:
        data = self._stream.read(size)
        if not self.has_content and data.strip():
            self.has_content = True
        return data


class TraceFileProcessor:
    """Reads MinIO trace output: a sequence of concatenated JSON objects."""

    @staticmethod
    def iter_stream(stream: BinaryIO) -> Iterator[Dict]:
        """
        Lazily decode trace records from a binary stream.

        Args:
            stream: Binary file-like object holding `mc admin trace --json` output

        Yields:
            One decoded record per top-level JSON value

        Raises:
            TraceFormatError: If the stream is not valid JSON
        """
        reader = _ContentTrackingReader(stream)
        record_count = 0
        try:
            for record in ijson.items(reader, '', multiple_values=True):
                record_count += 1
                if record_count % PROGRESS_INTERVAL == 0:
                    logger.info("  Read %d records...", record_count)
                yield record
        except ijson.JSONError as e:
            # Empty or whitespace-only input is an empty trace, not malformed JSON
            if record_count or reader.has_content:
                raise TraceFormatError(
                    f"invalid trace JSON after {record_count} records: {e}"
                ) from e

        logger.info("Completed reading trace: %d records found.", record_count)

    def iter_records(self, file_path: str) -> Iterator[Dict]:
        """
        Lazily decode trace records from a file.

        Args:
            file_path: Path to the trace file

        Yields:
            Decoded trace records in file order
        """
        logger.info("Processing %s...", file_path)

        with open(file_path, 'rb') as f:
            yield from self.iter_stream(f)
