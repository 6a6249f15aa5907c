"""
Result builder for web API output.
"""

from collections import Counter

from ..core.types import NANOS_PER_SECOND
from ..formatters import format_duration, format_timestamp_ns


def prepare_summary(trace, summary):
    """
    Convert an aggregated trace and its validation results to a JSON-ready structure.

    Args:
        trace: AggregatedTrace from StatemapConverter
        summary: EmitSummary from the emission pass

    Returns:
        Dictionary with trace, state, entity and violation details
    """
    epoch_ns = trace.epoch_ns
    span_ns = trace.last_end_ns - epoch_ns

    states = []
    for kind, code in trace.registry.items():
        states.append({
            'name': kind,
            'value': code,
            'color': trace.registry.color(kind),
        })

    kind_counts = Counter()
    entities = []
    for entity, operations in trace.timelines.items():
        busy_ns = sum(op.duration_ns for op in operations)
        kind_counts.update(op.kind for op in operations)
        entities.append({
            'entity': entity,
            'operation_count': len(operations),
            'busy_time_ns': busy_ns,
            'busy_time_formatted': format_duration(busy_ns),
        })

    entities.sort(key=lambda x: -x['busy_time_ns'])

    for state in states:
        state['operation_count'] = kind_counts.get(state['name'], 0)

    violations = [
        {
            'entity': v.entity,
            'previous_kind': v.previous_kind,
            'previous_end': format_timestamp_ns(v.previous_end_ns),
            'kind': v.kind,
            'start': format_timestamp_ns(v.start_ns),
            'overlap_ns': v.previous_end_ns - v.start_ns,
        }
        for v in summary.violations
    ]

    return {
        'summary': {
            'epoch': format_timestamp_ns(epoch_ns),
            'start': list(divmod(epoch_ns, NANOS_PER_SECOND)),
            'span_ns': span_ns,
            'span_formatted': format_duration(span_ns),
            'operation_count': trace.operation_count,
            'entity_count': trace.entity_count,
            'state_count': len(states),
            'event_count': summary.event_count,
            'violation_count': summary.violation_count,
        },
        'states': states,
        'entities': entities,
        'violations': violations,
    }
