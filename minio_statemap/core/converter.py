"""
Main statemap converter orchestrator.
"""

import logging
from typing import BinaryIO, Dict, Iterable, Iterator, Optional, TextIO

from ..core.types import (
    DEFAULT_HOST,
    DEFAULT_TITLE,
    DEFAULT_WAITING_COLOR,
    EmitSummary,
    StatemapConfig,
)
from ..processors import (
    AggregatedTrace,
    ParallelTraceAggregator,
    RecordNormalizer,
    TimelineEmitter,
    TraceAggregator,
    TraceFileProcessor,
)
from ..formatters import StatemapFormatter, format_duration, format_timestamp_ns

logger = logging.getLogger(__name__)


class StatemapConverter:
    """Main orchestrator for MinIO trace to statemap conversion."""

    def __init__(
        self,
        title: str = DEFAULT_TITLE,
        host: str = DEFAULT_HOST,
        waiting_color: str = DEFAULT_WAITING_COLOR,
        state_colors: Optional[Dict[str, str]] = None,
        num_workers: int = 1
    ):
        """
        Initialize the StatemapConverter.

        Args:
            title: Statemap title
            host: Cluster/host label shown in the statemap
            waiting_color: Display color of the waiting state
            state_colors: Optional mapping of operation kind -> display color
            num_workers: Worker processes used for aggregation; 1 aggregates sequentially
        """
        self.config = StatemapConfig(
            title=title,
            host=host,
            waiting_color=waiting_color,
            state_colors=state_colors
        )

        self.file_processor = TraceFileProcessor()
        self.normalizer = RecordNormalizer()

        if num_workers > 1:
            self.aggregator = ParallelTraceAggregator(num_workers, waiting_color=waiting_color)
        else:
            self.aggregator = TraceAggregator(waiting_color)

        self.formatter = StatemapFormatter(self.config)

        # Results of the last conversion
        self.trace: Optional[AggregatedTrace] = None
        self.summary: Optional[EmitSummary] = None

    def aggregate_records(self, records: Iterable[Dict]) -> AggregatedTrace:
        """
        Normalize and aggregate decoded trace records.

        The whole trace is scanned here, before any output is produced, so the
        header always agrees with every event that follows it.

        Args:
            records: Decoded MinIO trace records in trace order

        Returns:
            AggregatedTrace
        """
        trace = self.aggregator.aggregate(self.normalizer.normalize_all(records))
        for state, color in self.config.state_colors.items():
            trace.registry.set_color(state, color)

        logger.info(
            "Trace starts at %s and spans %s",
            format_timestamp_ns(trace.epoch_ns),
            format_duration(trace.last_end_ns - trace.epoch_ns)
        )

        self.trace = trace
        return trace

    def aggregate_stream(self, stream: BinaryIO) -> AggregatedTrace:
        return self.aggregate_records(self.file_processor.iter_stream(stream))

    def aggregate_file(self, file_path: str) -> AggregatedTrace:
        return self.aggregate_records(self.file_processor.iter_records(file_path))

    def iter_lines(self, trace: AggregatedTrace) -> Iterator[str]:
        """
        Serialize an aggregated trace as statemap lines.

        self.summary holds the validation results once the iterator is exhausted.

        Args:
            trace: AggregatedTrace to serialize

        Yields:
            Header line followed by one line per state event
        """
        emitter = TimelineEmitter(trace)
        yield from self.formatter.format_lines(trace, emitter.events())
        self.summary = emitter.summary

    def write(self, trace: AggregatedTrace, out: TextIO) -> EmitSummary:
        """
        Write the statemap for an aggregated trace to a text stream.

        Args:
            trace: AggregatedTrace to serialize
            out: Writable text stream

        Returns:
            EmitSummary with the event and violation counts
        """
        for line in self.iter_lines(trace):
            out.write(line)
            out.write('\n')
        return self.summary

    def convert_file(self, file_path: str, out: TextIO) -> EmitSummary:
        """
        Convert a MinIO trace file and write the statemap to out.

        Args:
            file_path: Path to the trace file
            out: Writable text stream

        Returns:
            EmitSummary with the event and violation counts
        """
        return self.write(self.aggregate_file(file_path), out)

    def convert_stream(self, stream: BinaryIO, out: TextIO) -> EmitSummary:
        return self.write(self.aggregate_stream(stream), out)

    def summarize(self, trace: AggregatedTrace) -> EmitSummary:
        """Run validation over a trace without serializing it."""
        self.summary = TimelineEmitter(trace).run()
        return self.summary
