"""
Pytest configuration and shared fixtures for minio statemap tests.
"""
import json
import pytest

from minio_statemap.core.types import Operation
from minio_statemap.formatters.time_formatter import format_timestamp_ns


def trace_record(host, api, end_ns, duration_ns, **extra):
    """Build a MinIO trace record ending at end_ns (nanoseconds since the Unix epoch)."""
    record = {
        "host": host,
        "time": format_timestamp_ns(end_ns),
        "client": "127.0.0.1:54321",
        "callStats": {
            "rx": 0,
            "tx": 512,
            "duration": duration_ns,
            "timeToFirstByte": 0
        },
        "api": api,
        "path": "/bucket/object",
        "query": "",
        "statusCode": 200,
        "statusMsg": "OK"
    }
    record.update(extra)
    return record


def operation(entity, kind, start_ns, end_ns):
    return Operation(entity=entity, kind=kind, start_time_ns=start_ns, end_time_ns=end_ns)


@pytest.fixture
def make_record():
    """Factory for MinIO trace records."""
    return trace_record


@pytest.fixture
def make_operation():
    """Factory for Operations."""
    return operation


@pytest.fixture
def example_records():
    """Two sequential operations on one host: Put then Get."""
    return [
        trace_record("h1", "Put", 1_000_000_000, 300_000_000),
        trace_record("h1", "Get", 1_500_000_000, 100_000_000),
    ]


@pytest.fixture
def overlapping_records():
    """Get starts before Put has finished on the same host."""
    return [
        trace_record("h1", "Put", 1_000_000_000, 300_000_000),
        trace_record("h1", "Get", 900_000_000, 400_000_000),
    ]


@pytest.fixture
def cluster_records():
    """A small multi-host trace in completion order."""
    return [
        trace_record("10.0.0.1:9000", "s3.PutObject", 1_622_548_800_250_000_000, 150_000_000),
        trace_record("10.0.0.2:9000", "s3.GetObject", 1_622_548_800_300_000_000, 280_000_000),
        trace_record("10.0.0.1:9000", "s3.GetObject", 1_622_548_800_400_000_000, 100_000_000),
        trace_record("10.0.0.2:9000", "s3.ListObjectsV2", 1_622_548_800_450_000_000, 50_000_000),
        trace_record("10.0.0.1:9000", "s3.PutObject", 1_622_548_800_900_000_000, 200_000_000),
    ]


@pytest.fixture
def write_trace(tmp_path):
    """Write records as concatenated JSON (mc admin trace --json output) and return the path."""
    def _write(records, name="trace.out"):
        file_path = tmp_path / name
        with open(file_path, "w") as f:
            for record in records:
                f.write(json.dumps(record))
                f.write("\n")
        return str(file_path)

    return _write
