"""
Exceptions raised while converting a trace into statemap data.
"""

from typing import Optional


class StatemapError(Exception):
    """Base exception for trace conversion errors."""
    pass


class TraceFormatError(StatemapError):
    """Raised when a trace record or the trace file itself is malformed."""

    def __init__(self, reason: str, record_index: Optional[int] = None):
        self.reason = reason
        self.record_index = record_index
        if record_index is None:
            message = reason
        else:
            message = f"record {record_index}: {reason}"
        super().__init__(message)


class EmptyTraceError(StatemapError):
    """Raised when a trace contains no operations, leaving the epoch undefined."""

    def __init__(self, message: str = "trace contains no operations"):
        super().__init__(message)
