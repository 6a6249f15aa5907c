"""
Statemap serialization: a header document followed by one document per state event.
"""

import json
from typing import Dict, Iterable, Iterator

from ..core.types import (
    NANOS_PER_SECOND,
    StateEvent,
    StateEventRecord,
    StatemapConfig,
    StatemapHeader,
    StateMetadata,
)


class StatemapFormatter:
    """Builds and serializes statemap records."""

    def __init__(self, config: StatemapConfig):
        """
        Args:
            config: StatemapConfig with title and host labels
        """
        self.config = config

    def build_header(self, trace) -> StatemapHeader:
        """
        Build the statemap header for an aggregated trace.

        Args:
            trace: AggregatedTrace with a finalized registry

        Returns:
            Header with the epoch split into [seconds, nanoseconds] and the state legend
        """
        epoch_seconds, epoch_nanos = divmod(trace.epoch_ns, NANOS_PER_SECOND)

        states: Dict[str, StateMetadata] = {}
        for kind, code in trace.registry.items():
            metadata: StateMetadata = {'value': code}
            color = trace.registry.color(kind)
            if color:
                metadata['color'] = color
            states[kind] = metadata

        return {
            'start': [epoch_seconds, epoch_nanos],
            'title': self.config.title,
            'host': self.config.host,
            'states': states,
        }

    @staticmethod
    def build_event(event: StateEvent) -> StateEventRecord:
        # Offsets are strings so large nanosecond values survive JSON readers
        return {
            'time': str(event.offset_ns),
            'entity': event.entity,
            'state': event.state_code,
        }

    def format_header(self, trace) -> str:
        return json.dumps(self.build_header(trace))

    def format_event(self, event: StateEvent) -> str:
        return json.dumps(self.build_event(event))

    def format_lines(self, trace, events: Iterable[StateEvent]) -> Iterator[str]:
        """
        Serialize a complete statemap stream, one JSON document per line.

        Args:
            trace: AggregatedTrace providing the header
            events: State events in emission order

        Yields:
            Header line, then one line per event
        """
        yield self.format_header(trace)
        for event in events:
            yield self.format_event(event)
