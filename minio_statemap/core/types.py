"""
Type definitions and wire schema for statemap conversion.

The input record keys and the output header/event shapes are defined here
once and shared by the normalizer and the statemap formatter.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, TypedDict

NANOS_PER_SECOND = 1_000_000_000

# Synthetic state entered once an operation completes
WAITING_STATE = 'waiting'
DEFAULT_WAITING_COLOR = 'white'

DEFAULT_TITLE = 'MinIO'
DEFAULT_HOST = 'minio cluster'

# MinIO (non-verbose) trace record keys
RECORD_HOST = 'host'
RECORD_TIME = 'time'
RECORD_API = 'api'
RECORD_CALL_STATS = 'callStats'
RECORD_DURATION = 'duration'


class StateMetadata(TypedDict, total=False):
    """Legend entry for one state in the statemap header."""
    value: int
    color: str


class StatemapHeader(TypedDict):
    """First document of a statemap stream."""
    start: List[int]
    title: str
    host: str
    states: Dict[str, StateMetadata]


class StateEventRecord(TypedDict):
    """One state transition in a statemap stream."""
    time: str
    entity: str
    state: int


@dataclass(frozen=True)
class Operation:
    """A single server operation with absolute start and end times in nanoseconds."""
    entity: str
    kind: str
    start_time_ns: int
    end_time_ns: int

    @property
    def duration_ns(self) -> int:
        return self.end_time_ns - self.start_time_ns


@dataclass(frozen=True)
class StateEvent:
    """An entity entering a state, offset from the trace epoch."""
    offset_ns: int
    entity: str
    state_code: int


@dataclass(frozen=True)
class OrderingViolation:
    """An operation that started before the previous one on its entity ended."""
    entity: str
    previous_kind: str
    previous_end_ns: int
    kind: str
    start_ns: int


@dataclass
class EmitSummary:
    """Validation results of a timeline emission pass."""
    event_count: int = 0
    violations: List[OrderingViolation] = field(default_factory=list)

    @property
    def violation_count(self) -> int:
        return len(self.violations)


class StatemapConfig:
    """Configuration for statemap generation."""

    def __init__(
        self,
        title: str = DEFAULT_TITLE,
        host: str = DEFAULT_HOST,
        waiting_color: str = DEFAULT_WAITING_COLOR,
        state_colors: Optional[Dict[str, str]] = None
    ):
        """
        Initialize statemap configuration.

        Args:
            title: Title displayed in the rendered statemap.
                   Default: "MinIO"

            host: Cluster or host label displayed in the rendered statemap.
                  Default: "minio cluster"

            waiting_color: Display color of the synthetic waiting state.
                           Default: "white"

            state_colors: Optional mapping of operation kind -> display color.
                          Kinds without an entry are left for the renderer
                          to color.
        """
        self.title = title
        self.host = host
        self.waiting_color = waiting_color
        self.state_colors = dict(state_colors or {})
