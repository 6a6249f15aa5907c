"""
Parallel trace aggregator for large trace files.
"""

import logging
import os
from multiprocessing import Pool
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.exceptions import TraceFormatError
from ..core.types import DEFAULT_WAITING_COLOR, WAITING_STATE, Operation
from .aggregator import StateRegistry, TraceAggregator, _ScanAccumulator

logger = logging.getLogger(__name__)

ChunkResult = Tuple[int, Optional[int], Dict[str, int], Dict[str, List[Operation]], int]


def _aggregate_chunk(args: Tuple[int, List[Operation]]) -> ChunkResult:
    """
    Aggregate one contiguous chunk of the trace. Designed to run in a worker process.

    Kinds are reported with the global index of their first occurrence so the
    merge can assign codes in whole-trace first-seen order.

    Args:
        args: Tuple of (index of the chunk's first operation, operations)

    Returns:
        Tuple of (chunk_start, min_start_ns, kind_first_index, timelines, count)
    """
    chunk_start, operations = args

    min_start_ns = None
    kind_first_index: Dict[str, int] = {}
    timelines: Dict[str, List[Operation]] = {}

    for offset, op in enumerate(operations):
        if min_start_ns is None or op.start_time_ns < min_start_ns:
            min_start_ns = op.start_time_ns
        if op.kind not in kind_first_index:
            if op.kind == WAITING_STATE:
                raise TraceFormatError(f"operation kind '{WAITING_STATE}' is reserved",
                                       chunk_start + offset)
            kind_first_index[op.kind] = chunk_start + offset
        timelines.setdefault(op.entity, []).append(op)

    return chunk_start, min_start_ns, kind_first_index, timelines, len(operations)


def merge_chunk_results(results: Iterable[ChunkResult]) -> _ScanAccumulator:
    """
    Merge per-chunk partial aggregates into a single scan result.

    Codes follow the global first-seen order of each kind, which is what a
    sequential scan would assign. Per-entity lists are concatenated in chunk
    order, preserving arrival order.

    Args:
        results: Chunk results in any order

    Returns:
        Accumulator equivalent to a sequential scan of the whole trace
    """
    acc = _ScanAccumulator()
    first_seen: Dict[str, int] = {}

    for _, min_start_ns, kinds, timelines, count in sorted(results, key=lambda r: r[0]):
        if min_start_ns is not None and (acc.min_start_ns is None or min_start_ns < acc.min_start_ns):
            acc.min_start_ns = min_start_ns
        for kind, index in kinds.items():
            if kind not in first_seen or index < first_seen[kind]:
                first_seen[kind] = index
        for entity, ops in timelines.items():
            acc.timelines.setdefault(entity, []).extend(ops)
        acc.operation_count += count

    acc.registry = StateRegistry.from_kinds(sorted(first_seen, key=first_seen.get))
    return acc


class ParallelTraceAggregator(TraceAggregator):
    """Aggregate trace chunks in parallel using multiprocessing."""

    def __init__(
        self,
        num_workers: Optional[int] = None,
        chunk_size: Optional[int] = None,
        waiting_color: Optional[str] = DEFAULT_WAITING_COLOR
    ):
        """
        Initialize parallel aggregator.

        Args:
            num_workers: Number of worker processes (default: CPU count)
            chunk_size: Operations per chunk (default: split evenly across workers)
            waiting_color: Display color given to the waiting state
        """
        super().__init__(waiting_color)
        self.num_workers = num_workers or os.cpu_count() or 4
        self.chunk_size = chunk_size

    def aggregate(self, operations: Iterable[Operation]):
        """
        Aggregate operations, splitting the work across worker processes.

        Falls back to the sequential fold for a single worker or a trace that
        fits in one chunk.
        """
        operations = list(operations)
        total = len(operations)

        chunk_size = self.chunk_size or max(1, -(-total // self.num_workers))
        if self.num_workers <= 1 or total <= chunk_size:
            return super().aggregate(operations)

        work_items = [
            (start, operations[start:start + chunk_size])
            for start in range(0, total, chunk_size)
        ]
        effective_workers = min(self.num_workers, len(work_items))

        logger.info("Aggregating %d operations in %d chunks on %d workers",
                    total, len(work_items), effective_workers)

        results = []
        with Pool(processes=effective_workers) as pool:
            for result in pool.imap_unordered(_aggregate_chunk, work_items, chunksize=1):
                results.append(result)

        return self._finish(merge_chunk_results(results))
