"""
Unit tests for minio_statemap.processors.normalizer module.
"""
from decimal import Decimal

import pytest

from minio_statemap.core.exceptions import TraceFormatError
from minio_statemap.processors.normalizer import RecordNormalizer, parse_timestamp_ns


class TestParseTimestampNs:
    """Tests for the parse_timestamp_ns() function."""

    def test_utc_without_fraction(self):
        assert parse_timestamp_ns("2020-03-05T18:51:23Z") == 1_583_434_283_000_000_000

    def test_nanosecond_fraction_is_exact(self):
        """Nine fractional digits must survive without floating point rounding."""
        assert parse_timestamp_ns("2020-03-05T18:51:23.358414062Z") == 1_583_434_283_358_414_062

    def test_short_fraction_is_right_padded(self):
        assert parse_timestamp_ns("2020-03-05T18:51:23.5Z") == 1_583_434_283_500_000_000
        assert parse_timestamp_ns("2020-03-05T18:51:23.000001Z") == 1_583_434_283_000_001_000

    def test_numeric_offset(self):
        """Offsets are normalized to UTC."""
        assert parse_timestamp_ns("2020-03-05T19:51:23.5+01:00") == 1_583_434_283_500_000_000
        assert parse_timestamp_ns("2020-03-05T13:21:23.5-05:30") == 1_583_434_283_500_000_000

    def test_unix_epoch(self):
        assert parse_timestamp_ns("1970-01-01T00:00:00Z") == 0
        assert parse_timestamp_ns("1970-01-01T00:00:01.5Z") == 1_500_000_000

    @pytest.mark.parametrize("value", [
        "",
        "not a timestamp",
        "2020-03-05",
        "2020-03-05T18:51:23",           # no zone
        "2020-13-05T18:51:23Z",          # month 13
        "2020-02-30T18:51:23Z",          # Feb 30
        "2020-03-05T18:51:23.1234567890Z",  # finer than nanoseconds
        "9999-12-31T23:59:59-01:00",     # past year 9999 in UTC
        "0001-01-01T00:30:00+01:00",     # before year 1 in UTC
    ])
    def test_invalid_timestamps(self, value):
        with pytest.raises(ValueError):
            parse_timestamp_ns(value)


class TestRecordNormalizer:
    """Tests for RecordNormalizer.normalize()."""

    def test_start_is_end_minus_duration(self, make_record):
        record = make_record("h1", "Put", 1_000_000_000, 300_000_000)
        op = RecordNormalizer().normalize(record)

        assert op.entity == "h1"
        assert op.kind == "Put"
        assert op.end_time_ns == 1_000_000_000
        assert op.start_time_ns == 700_000_000
        assert op.duration_ns == 300_000_000

    def test_zero_duration(self, make_record):
        op = RecordNormalizer().normalize(make_record("h1", "Put", 1_000_000_000, 0))
        assert op.start_time_ns == op.end_time_ns == 1_000_000_000

    def test_ancillary_fields_ignored(self, make_record):
        record = make_record("h1", "Put", 1_000_000_000, 1, statusCode=503, extra={"a": 1})
        op = RecordNormalizer().normalize(record)
        assert op.kind == "Put"

    def test_real_minio_record(self):
        record = {
            "host": "127.0.0.1:9000",
            "time": "2020-03-05T18:51:23.358414062Z",
            "client": "127.0.0.1:50388",
            "callStats": {"rx": 0, "tx": 245, "duration": 358414062, "timeToFirstByte": 0},
            "api": "s3.ListBuckets",
            "path": "/",
            "query": "",
            "statusCode": 200,
            "statusMsg": "OK"
        }
        op = RecordNormalizer().normalize(record)
        assert op.end_time_ns == 1_583_434_283_358_414_062
        assert op.start_time_ns == 1_583_434_283_000_000_000

    @pytest.mark.parametrize("missing", ["host", "time", "api", "callStats"])
    def test_missing_required_field(self, make_record, missing):
        record = make_record("h1", "Put", 1_000_000_000, 1)
        del record[missing]
        with pytest.raises(TraceFormatError) as exc_info:
            RecordNormalizer().normalize(record, 7)
        assert missing in str(exc_info.value)
        assert exc_info.value.record_index == 7
        assert "record 7" in str(exc_info.value)

    def test_missing_duration(self, make_record):
        record = make_record("h1", "Put", 1_000_000_000, 1)
        del record["callStats"]["duration"]
        with pytest.raises(TraceFormatError, match="callStats.duration"):
            RecordNormalizer().normalize(record)

    def test_empty_host(self, make_record):
        with pytest.raises(TraceFormatError, match="host"):
            RecordNormalizer().normalize(make_record("", "Put", 1_000_000_000, 1))

    @pytest.mark.parametrize("duration", ["300", 1.5, Decimal("1.5"), True, None])
    def test_non_integer_duration(self, make_record, duration):
        record = make_record("h1", "Put", 1_000_000_000, 1)
        record["callStats"]["duration"] = duration
        with pytest.raises(TraceFormatError, match="not an integer"):
            RecordNormalizer().normalize(record)

    def test_negative_duration(self, make_record):
        with pytest.raises(TraceFormatError, match="negative duration"):
            RecordNormalizer().normalize(make_record("h1", "Put", 1_000_000_000, -5))

    def test_unparsable_timestamp(self, make_record):
        record = make_record("h1", "Put", 1_000_000_000, 1)
        record["time"] = "yesterday"
        with pytest.raises(TraceFormatError, match="unparsable timestamp"):
            RecordNormalizer().normalize(record, 3)

    def test_timestamp_out_of_utc_range(self, make_record):
        record = make_record("h1", "Put", 1_000_000_000, 1)
        record["time"] = "9999-12-31T23:59:59-01:00"
        with pytest.raises(TraceFormatError, match="out of range") as exc_info:
            RecordNormalizer().normalize(record, 4)
        assert exc_info.value.record_index == 4

    def test_timestamp_before_unix_epoch(self, make_record):
        record = make_record("h1", "Put", 1_000_000_000, 1)
        record["time"] = "1969-12-31T23:59:59Z"
        with pytest.raises(TraceFormatError, match="predates the Unix epoch"):
            RecordNormalizer().normalize(record)

    def test_start_underflow(self, make_record):
        record = make_record("h1", "Put", 1_000_000_000, 2_000_000_000)
        with pytest.raises(TraceFormatError, match="before the Unix epoch"):
            RecordNormalizer().normalize(record)

    def test_non_object_record(self):
        with pytest.raises(TraceFormatError, match="not a JSON object"):
            RecordNormalizer().normalize(["h1", "Put"], 0)

    def test_normalize_all_is_lazy_and_numbers_records(self, make_record):
        records = [
            make_record("h1", "Put", 1_000_000_000, 1),
            {"host": "h1"},
        ]
        operations = RecordNormalizer().normalize_all(records)

        first = next(operations)
        assert first.kind == "Put"

        with pytest.raises(TraceFormatError) as exc_info:
            next(operations)
        assert exc_info.value.record_index == 1
