"""Tests for measurement timestamp parsing."""

from datetime import datetime, timedelta, timezone

import pytest

from steamcity.utils.timestamp import parse_measurement_time


class TestParseMeasurementTime:
    """Tests for parse_measurement_time function."""

    def test_aware_datetime_is_kept(self) -> None:
        """UTC datetime input should be returned unchanged."""
        dt = datetime(2024, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
        assert parse_measurement_time(dt) == dt

    def test_naive_datetime_gets_utc(self) -> None:
        """Naive datetime should be taken as UTC."""
        result = parse_measurement_time(datetime(2024, 1, 15, 12, 30, 45))
        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_int_unix_ms(self) -> None:
        """Integer should be treated as UNIX milliseconds."""
        # 2024-01-15T12:30:45.123Z in ms
        result = parse_measurement_time(1705321845123)
        assert result.tzinfo == timezone.utc
        assert (result.year, result.month, result.day) == (2024, 1, 15)

    def test_negative_timestamp(self) -> None:
        """Timestamps before 1970 should work."""
        result = parse_measurement_time(-86400000)
        assert (result.year, result.month, result.day) == (1969, 12, 31)

    def test_iso8601_with_z_suffix(self) -> None:
        """The API's ``Z`` suffix should parse as UTC."""
        result = parse_measurement_time("2024-01-15T12:30:45Z")
        assert result == datetime(2024, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

    def test_iso8601_with_millis(self) -> None:
        """Test iso8601 with millis."""
        result = parse_measurement_time("2024-01-15T12:30:45.500Z")
        assert result.microsecond == 500000

    def test_offsets_are_normalized_to_utc(self) -> None:
        """Offsets are converted so measurements from any source compare."""
        result = parse_measurement_time("2024-01-15T12:30:45+09:00")
        assert result.utcoffset() == timedelta(0)
        assert result.hour == 3

    def test_aware_datetime_in_other_zone_is_converted(self) -> None:
        """Test aware datetime in other zone is converted."""
        jst = timezone(timedelta(hours=9))
        result = parse_measurement_time(datetime(2024, 1, 15, 21, 30, tzinfo=jst))
        assert result == datetime(2024, 1, 15, 12, 30, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc

    def test_none_raises_value_error(self) -> None:
        """Test that None raises ValueError."""
        with pytest.raises(ValueError, match="missing"):
            parse_measurement_time(None)  # type: ignore[arg-type]

    def test_empty_string_raises_value_error(self) -> None:
        """Test that an empty string raises ValueError."""
        with pytest.raises(ValueError, match="empty"):
            parse_measurement_time("   ")

    def test_invalid_string_raises_value_error(self) -> None:
        """Test that an invalid string raises ValueError."""
        with pytest.raises(ValueError, match="Not an ISO 8601"):
            parse_measurement_time("not-a-timestamp")

    def test_unsupported_type_raises_value_error(self) -> None:
        """Test that an unsupported type raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported measurement time type"):
            parse_measurement_time([1, 2, 3])  # type: ignore[arg-type]

    def test_bool_raises_value_error(self) -> None:
        """Test that a boolean is not read as epoch milliseconds."""
        with pytest.raises(ValueError, match="Not a measurement time"):
            parse_measurement_time(True)  # type: ignore[arg-type]
