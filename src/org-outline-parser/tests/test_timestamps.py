"""Tests for org timestamp and duration helpers."""

import pytest
from datetime import datetime, timedelta

from org_outline.timestamps import (
    format_clock_timestamp,
    format_duration,
    format_org_date,
    parse_clock_timestamp,
    parse_date_input,
    parse_org_date,
)


class TestParseOrgDate:
    """Tests for planning date parsing."""

    def test_date_only(self):
        """Test bare ISO date."""
        assert parse_org_date("2024-01-15") == datetime(2024, 1, 15)

    def test_date_with_day_name(self):
        """Test date followed by a day name."""
        assert parse_org_date("2024-01-15 Mon") == datetime(2024, 1, 15)

    def test_date_with_time(self):
        """Test date with day name and time of day."""
        assert parse_org_date("2024-01-15 Mon 10:30") == datetime(2024, 1, 15, 10, 30)

    def test_day_name_not_checked(self):
        """Test that a wrong day name is accepted."""
        assert parse_org_date("2024-01-15 Fri") == datetime(2024, 1, 15)

    @pytest.mark.parametrize("text", ["", "tomorrow", "2024-13-01", "2024-01-15 Mon 10:00:05"])
    def test_invalid_dates_raise(self, text):
        """Test that malformed planning dates raise ValueError."""
        with pytest.raises(ValueError):
            parse_org_date(text)


class TestParseClockTimestamp:
    """Tests for clock stamp parsing."""

    def test_with_minutes(self):
        assert parse_clock_timestamp("2024-01-15 Mon 09:05") == datetime(2024, 1, 15, 9, 5)

    def test_with_seconds(self):
        """Test that seconds are accepted in clock stamps."""
        assert parse_clock_timestamp("2024-01-15 Mon 09:05:30") == datetime(2024, 1, 15, 9, 5, 30)

    def test_requires_time(self):
        """Test that a stamp without time of day is rejected."""
        with pytest.raises(ValueError, match="clock timestamp"):
            parse_clock_timestamp("2024-01-15 Mon")


class TestFormatting:
    """Tests for date, stamp and duration formatting."""

    def test_format_org_date_midnight(self):
        """Test that midnight dates omit the time."""
        assert format_org_date(datetime(2024, 1, 15)) == "2024-01-15 Mon"

    def test_format_org_date_with_time(self):
        """Test that a time of day is kept."""
        assert format_org_date(datetime(2024, 1, 15, 14, 0)) == "2024-01-15 Mon 14:00"

    def test_format_clock_timestamp(self):
        assert format_clock_timestamp(datetime(2024, 1, 21, 8, 7)) == "2024-01-21 Sun 08:07"

    def test_format_duration_minutes(self):
        assert format_duration(timedelta(minutes=42)) == "42m"

    def test_format_duration_hours(self):
        assert format_duration(timedelta(hours=1, minutes=5)) == "1h 5m"

    def test_format_duration_negative_is_zero(self):
        assert format_duration(timedelta(minutes=-3)) == "0m"


class TestParseDateInput:
    """Tests for user-typed dates."""

    def test_relative_days(self):
        """Test +N is N days after now."""
        now = datetime(2024, 1, 15, 12, 0)
        assert parse_date_input("+3", now=now) == datetime(2024, 1, 18, 12, 0)

    @pytest.mark.parametrize("text", ["2024-02-01", "2024/02/01", "02/01/2024"])
    def test_absolute_forms(self, text):
        """Test each supported absolute form."""
        assert parse_date_input(text) == datetime(2024, 2, 1)

    def test_invalid_relative(self):
        with pytest.raises(ValueError, match="relative date"):
            parse_date_input("+x")

    def test_unparseable(self):
        with pytest.raises(ValueError, match="unable to parse date"):
            parse_date_input("next week")
