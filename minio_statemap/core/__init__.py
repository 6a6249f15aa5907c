"""Core components for statemap conversion."""

from .converter import StatemapConverter
from .exceptions import EmptyTraceError, StatemapError, TraceFormatError
from .types import EmitSummary, Operation, OrderingViolation, StateEvent, StatemapConfig

__all__ = [
    "StatemapConverter",
    "StatemapError",
    "TraceFormatError",
    "EmptyTraceError",
    "EmitSummary",
    "Operation",
    "OrderingViolation",
    "StateEvent",
    "StatemapConfig",
]
