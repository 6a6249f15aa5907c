"""
Trace aggregator: epoch, state registry and per-entity timelines.
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..core.exceptions import EmptyTraceError, TraceFormatError
from ..core.types import DEFAULT_WAITING_COLOR, WAITING_STATE, Operation

logger = logging.getLogger(__name__)


class StateRegistry:
    """
    Maps operation kinds to integer state codes in first-seen order.

    The synthetic waiting state is appended by finalize() once every real
    kind has been seen, so its code equals the number of real kinds.
    """

    def __init__(self):
        self._codes: Dict[str, int] = {}
        self._colors: Dict[str, str] = {}
        self._finalized = False

    @classmethod
    def from_kinds(cls, kinds: Iterable[str]) -> 'StateRegistry':
        """Build a registry from kinds already in first-seen order."""
        registry = cls()
        for kind in kinds:
            registry.register(kind)
        return registry

    def register(self, kind: str, record_index: Optional[int] = None) -> int:
        """
        Return the code of a kind, assigning the next code on first sight.

        Raises:
            TraceFormatError: If a real operation uses the reserved waiting name
            RuntimeError: If the registry was already finalized
        """
        code = self._codes.get(kind)
        if code is not None:
            return code
        if self._finalized:
            raise RuntimeError(f"cannot register '{kind}' after the registry was finalized")
        if kind == WAITING_STATE:
            raise TraceFormatError(f"operation kind '{WAITING_STATE}' is reserved", record_index)
        code = len(self._codes)
        self._codes[kind] = code
        return code

    def finalize(self, waiting_color: Optional[str] = DEFAULT_WAITING_COLOR) -> int:
        """Append the waiting state and freeze the registry. Returns its code."""
        if not self._finalized:
            self._codes[WAITING_STATE] = len(self._codes)
            self._finalized = True
        if waiting_color:
            self._colors[WAITING_STATE] = waiting_color
        return self._codes[WAITING_STATE]

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def waiting_code(self) -> int:
        if not self._finalized:
            raise RuntimeError("waiting state is only assigned once the trace is fully scanned")
        return self._codes[WAITING_STATE]

    def code(self, kind: str) -> int:
        return self._codes[kind]

    def set_color(self, state: str, color: str) -> None:
        self._colors[state] = color

    def color(self, state: str) -> Optional[str]:
        return self._colors.get(state)

    def items(self) -> Iterator[Tuple[str, int]]:
        """(kind, code) pairs in code order."""
        return iter(self._codes.items())

    def real_kinds(self) -> List[str]:
        return [kind for kind in self._codes if kind != WAITING_STATE]

    def __contains__(self, kind: str) -> bool:
        return kind in self._codes

    def __len__(self) -> int:
        return len(self._codes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, StateRegistry):
            return NotImplemented
        return list(self.items()) == list(other.items()) and self._finalized == other._finalized

    def __repr__(self) -> str:
        return f"StateRegistry({dict(self._codes)!r})"


@dataclass
class AggregatedTrace:
    """Result of a full trace scan, read-only once returned."""
    epoch_ns: int
    registry: StateRegistry
    timelines: Dict[str, List[Operation]]
    operation_count: int

    @property
    def entity_count(self) -> int:
        return len(self.timelines)

    @property
    def last_end_ns(self) -> int:
        return max(op.end_time_ns for ops in self.timelines.values() for op in ops)


@dataclass
class _ScanAccumulator:
    """Running state threaded through the aggregation fold."""
    min_start_ns: Optional[int] = None
    registry: StateRegistry = field(default_factory=StateRegistry)
    timelines: Dict[str, List[Operation]] = field(default_factory=dict)
    operation_count: int = 0


class TraceAggregator:
    """Folds a stream of Operations into an AggregatedTrace."""

    def __init__(self, waiting_color: Optional[str] = DEFAULT_WAITING_COLOR):
        """
        Args:
            waiting_color: Display color given to the waiting state
        """
        self.waiting_color = waiting_color

    @staticmethod
    def _accumulate(acc: _ScanAccumulator, op: Operation) -> _ScanAccumulator:
        if acc.min_start_ns is None or op.start_time_ns < acc.min_start_ns:
            acc.min_start_ns = op.start_time_ns
        # operation_count is the index of op within the trace
        acc.registry.register(op.kind, acc.operation_count)
        acc.timelines.setdefault(op.entity, []).append(op)
        acc.operation_count += 1
        return acc

    def aggregate(self, operations: Iterable[Operation]) -> AggregatedTrace:
        """
        Consume every Operation and build the epoch, registry and timelines.

        Input order is completion order, so the epoch is the minimum start
        over the whole trace rather than the first record's start.

        Args:
            operations: Iterable of Operations in trace order

        Returns:
            AggregatedTrace with a finalized registry

        Raises:
            EmptyTraceError: If no operations were supplied
        """
        acc = reduce(self._accumulate, operations, _ScanAccumulator())
        return self._finish(acc)

    def _finish(self, acc: _ScanAccumulator) -> AggregatedTrace:
        if acc.operation_count == 0 or acc.min_start_ns is None:
            raise EmptyTraceError()

        acc.registry.finalize(self.waiting_color)

        logger.info(
            "Aggregated %d operations across %d entities, %d distinct operation kinds",
            acc.operation_count, len(acc.timelines), len(acc.registry) - 1
        )

        return AggregatedTrace(
            epoch_ns=acc.min_start_ns,
            registry=acc.registry,
            timelines=acc.timelines,
            operation_count=acc.operation_count
        )
