"""Tests for date parser."""
import pytest
from datetime import date, datetime, timezone, timedelta

from ledger_bridge.utils.date_parser import (
    format_swift_date,
    normalize_date_string,
    parse_date,
    parse_swift_date,
    to_plain_date,
    to_utc_datetime,
)


class TestParseDate:
    """Test generic date parsing."""

    def test_parse_russian_numeric(self):
        """Test dd.mm.yyyy dates."""
        assert parse_date("26.10.2023") == datetime(2023, 10, 26)

    def test_parse_iso(self):
        """Test YYYY-MM-DD dates."""
        assert parse_date("2023-10-26") == datetime(2023, 10, 26)

    def test_parse_russian_long_date(self):
        """Test Russian genitive month names with the year suffix."""
        assert parse_date("01 января 2024 г.") == datetime(2024, 1, 1)
        assert parse_date("15 Марта 2024") == datetime(2024, 3, 15)

    def test_parse_iso_datetime_keeps_offset(self):
        """Test ISO 8601 datetimes with an offset."""
        parsed = parse_date("2024-01-31T23:59:59+02:00")

        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timedelta(hours=2)
        assert parsed.date() == date(2024, 1, 31)

    def test_parse_invalid(self):
        """Test that unparseable dates return None."""
        assert parse_date("31.02.2024") is None
        assert parse_date("yesterday") is None
        assert parse_date("") is None
        assert parse_date(None) is None


class TestSwiftDate:
    """Test YYMMDD dates."""

    def test_century_pivot(self):
        """Test two-digit years 00-49 map to 20xx and 50-99 to 19xx."""
        assert parse_swift_date("250218") == datetime(2025, 2, 18, tzinfo=timezone.utc)
        assert parse_swift_date("950315") == datetime(1995, 3, 15, tzinfo=timezone.utc)
        assert parse_swift_date("491231").year == 2049
        assert parse_swift_date("500101").year == 1950

    def test_invalid_calendar_date(self):
        """Test that impossible dates raise ValueError."""
        with pytest.raises(ValueError):
            parse_swift_date("241301")
        with pytest.raises(ValueError):
            parse_swift_date("230229")

    def test_wrong_length(self):
        """Test that values other than six digits raise ValueError."""
        with pytest.raises(ValueError):
            parse_swift_date("2401")
        with pytest.raises(ValueError):
            parse_swift_date("24O101")

    def test_format(self):
        """Test formatting as YYMMDD."""
        assert format_swift_date(date(2020, 1, 1)) == "200101"


class TestDateConversion:
    """Test date representation helpers."""

    def test_to_utc_datetime_from_date(self):
        """Test lifting a plain date to UTC midnight."""
        assert to_utc_datetime(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_to_utc_datetime_keeps_aware(self):
        """Test that aware datetimes are returned unchanged."""
        value = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert to_utc_datetime(value) is value

    def test_to_plain_date(self):
        """Test dropping time and timezone."""
        assert to_plain_date(datetime(2024, 1, 1, 10, tzinfo=timezone.utc)) == date(2024, 1, 1)
        assert to_plain_date(date(2024, 1, 1)) == date(2024, 1, 1)


class TestNormalizeDateString:
    """Test date string normalization."""

    def test_collapses_whitespace(self):
        """Test that runs of whitespace are collapsed."""
        assert normalize_date_string("01   мая  2024") == "01 May 2024"

    def test_strips_year_suffix(self):
        """Test that the trailing year marker is dropped."""
        assert normalize_date_string("31 декабря 2023 г.") == "31 December 2023"
