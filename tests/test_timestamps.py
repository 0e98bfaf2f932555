"""Tests for UTC timestamp helpers."""

from datetime import datetime, timedelta, timezone

import pytest

from lostfound.utils.timestamps import ensure_utc, format_timestamp, parse_timestamp, utc_now


def test_utc_now_is_aware():
    now = utc_now()
    assert now.tzinfo == timezone.utc


class TestEnsureUtc:
    def test_none(self):
        assert ensure_utc(None) is None

    def test_naive(self):
        assert ensure_utc(datetime(2025, 11, 1, 12, 0)).tzinfo == timezone.utc

    def test_converts_offset(self):
        pst = timezone(timedelta(hours=-8))
        result = ensure_utc(datetime(2025, 11, 1, 4, 0, tzinfo=pst))
        assert result == datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc)
        assert result.utcoffset() == timedelta(0)


class TestFormatTimestamp:
    def test_format(self):
        dt = datetime(2025, 11, 1, 12, 0, 5, 123456, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2025-11-01T12:00:05Z"
        assert format_timestamp(dt, include_microseconds=True) == "2025-11-01T12:00:05.123456Z"

    def test_none(self):
        assert format_timestamp(None) == ""


class TestParseTimestamp:
    @pytest.mark.parametrize(
        "value",
        ["2025-11-01T12:00:00Z", "2025-11-01T12:00:00+00:00", "2025-11-01T17:30:00+05:30", "2025-11-01T12:00:00"],
    )
    def test_parses_to_utc(self, value):
        assert parse_timestamp(value) == datetime(2025, 11, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "yesterday", "2025-13-01"])
    def test_invalid_returns_none(self, value):
        assert parse_timestamp(value) is None

    def test_round_trip_with_microseconds(self):
        dt = datetime(2025, 11, 1, 12, 0, 0, 500, tzinfo=timezone.utc)
        assert parse_timestamp(format_timestamp(dt, include_microseconds=True)) == dt
