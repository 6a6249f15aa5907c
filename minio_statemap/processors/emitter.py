"""
Timeline emitter: per-entity state transitions with ordering validation.
"""

import logging
from typing import Iterator, List

from ..core.types import EmitSummary, Operation, OrderingViolation, StateEvent
from ..formatters.time_formatter import format_timestamp_ns
from .aggregator import AggregatedTrace

logger = logging.getLogger(__name__)


class TimelineEmitter:
    """Emits two state events per operation, entity by entity."""

    def __init__(self, trace: AggregatedTrace):
        """
        Args:
            trace: Fully aggregated trace with a finalized registry
        """
        self.trace = trace
        self.summary = EmitSummary()

    def events(self) -> Iterator[StateEvent]:
        """
        Lazily emit every state event of the trace.

        Each entity's operations are walked in arrival order. An operation that
        starts before the previous one on the same entity ended is recorded as
        an ordering violation, and emission continues. The summary is complete
        once the iterator is exhausted.

        Yields:
            StateEvents with offsets relative to the trace epoch
        """
        self.summary = EmitSummary()
        for entity, operations in self.trace.timelines.items():
            yield from self._entity_events(entity, operations)
        self._report()

    def _entity_events(self, entity: str, operations: List[Operation]) -> Iterator[StateEvent]:
        epoch = self.trace.epoch_ns
        registry = self.trace.registry
        waiting = registry.waiting_code

        previous = None
        for op in operations:
            if previous is not None and op.start_time_ns < previous.end_time_ns:
                self._record_violation(entity, previous, op)

            yield StateEvent(op.start_time_ns - epoch, entity, registry.code(op.kind))
            yield StateEvent(op.end_time_ns - epoch, entity, waiting)
            self.summary.event_count += 2
            previous = op

    def _record_violation(self, entity: str, previous: Operation, op: Operation) -> None:
        violation = OrderingViolation(
            entity=entity,
            previous_kind=previous.kind,
            previous_end_ns=previous.end_time_ns,
            kind=op.kind,
            start_ns=op.start_time_ns
        )
        self.summary.violations.append(violation)
        logger.warning(
            "%s: %s starting at %s precedes end of %s at %s",
            entity, op.kind, format_timestamp_ns(op.start_time_ns),
            previous.kind, format_timestamp_ns(previous.end_time_ns)
        )

    def _report(self) -> None:
        if self.summary.violation_count:
            logger.warning("%d out-of-order timestamps discovered", self.summary.violation_count)
        else:
            logger.info("%d states discovered", self.summary.event_count)

    def run(self) -> EmitSummary:
        """Consume all events without keeping them and return the summary."""
        for _ in self.events():
            pass
        return self.summary
