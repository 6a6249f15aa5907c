"""
MinIO Statemap - MinIO trace to statemap conversion tool
"""

__version__ = "1.0.0"

from .core.converter import StatemapConverter
from .core.exceptions import EmptyTraceError, StatemapError, TraceFormatError
from .core.types import StatemapConfig

__all__ = [
    "StatemapConverter",
    "StatemapConfig",
    "StatemapError",
    "TraceFormatError",
    "EmptyTraceError",
]
