"""Processors for trace data transformation and validation."""

from .file_processor import TraceFileProcessor
from .normalizer import RecordNormalizer, parse_timestamp_ns
from .aggregator import AggregatedTrace, StateRegistry, TraceAggregator
from .parallel_processor import ParallelTraceAggregator
from .emitter import TimelineEmitter

__all__ = [
    "TraceFileProcessor",
    "RecordNormalizer",
    "parse_timestamp_ns",
    "AggregatedTrace",
    "StateRegistry",
    "TraceAggregator",
    "ParallelTraceAggregator",
    "TimelineEmitter",
]
