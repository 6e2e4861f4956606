"""
Tests for DateService.

Tests cover:
1. Calendar date parsing from dates, datetimes and strings
2. HH:MM parsing
3. ISO week keys and midnight normalization
"""
import pytest
from datetime import date, datetime

from streakmate.services.date_service import DateService
from streakmate.exceptions import InvalidDateFormatException, InvalidTimeFormatException


class TestParseDate:
    """Tests for parse_date and parse_date_set"""

    def test_parses_plain_date_string(self):
        """A YYYY-MM-DD string parses to its calendar date"""
        assert DateService.parse_date("2024-01-05") == date(2024, 1, 5)

    def test_strips_time_from_datetime(self):
        """A datetime keeps only its date part"""
        assert DateService.parse_date(datetime(2024, 1, 5, 23, 59)) == date(2024, 1, 5)

    def test_accepts_date_object(self):
        """A date object passes through unchanged"""
        assert DateService.parse_date(date(2024, 1, 5)) == date(2024, 1, 5)

    def test_accepts_iso_timestamp_string(self):
        """Timestamps keep their own calendar date"""
        assert DateService.parse_date("2024-01-05T23:30:00Z") == date(2024, 1, 5)
        assert DateService.parse_date("2024-01-05T08:00:00") == date(2024, 1, 5)

    def test_rejects_impossible_date(self):
        """An impossible calendar date names the offending field"""
        with pytest.raises(InvalidDateFormatException) as exc:
            DateService.parse_date("2024-02-30", "date")
        assert exc.value.field == "date"

    def test_rejects_garbage_and_non_strings(self):
        """Free text and non-string values are rejected"""
        with pytest.raises(InvalidDateFormatException):
            DateService.parse_date("yesterday")
        with pytest.raises(InvalidDateFormatException):
            DateService.parse_date(20240105)

    def test_date_set_deduplicates(self):
        """Dates given in different forms collapse to one entry"""
        days = DateService.parse_date_set(["2024-01-05", datetime(2024, 1, 5, 12), date(2024, 1, 6)])
        assert days == {date(2024, 1, 5), date(2024, 1, 6)}

    def test_date_set_empty(self):
        """Missing or empty histories give an empty set"""
        assert DateService.parse_date_set(None) == set()
        assert DateService.parse_date_set([]) == set()

    def test_date_set_reports_completed_dates_field(self):
        """A bad entry in a history is reported against completed_dates"""
        with pytest.raises(InvalidDateFormatException) as exc:
            DateService.parse_date_set(["2024-01-05", "bogus"])
        assert exc.value.field == "completed_dates"


class TestParseTime:
    """Tests for parse_time"""

    def test_minutes_since_midnight(self):
        """HH:MM converts to minutes since midnight"""
        assert DateService.parse_time("07:30") == 450
        assert DateService.parse_time("00:00") == 0
        assert DateService.parse_time("23:59") == 1439

    def test_single_digit_hour(self):
        """A single digit hour is accepted"""
        assert DateService.parse_time("7:05") == 425

    def test_empty_means_unset(self):
        """Blank or missing times mean no time is set"""
        assert DateService.parse_time("") is None
        assert DateService.parse_time("   ") is None
        assert DateService.parse_time(None) is None

    @pytest.mark.parametrize("value", ["24:00", "12:60", "7pm", "07:3", "07-30"])
    def test_rejects_malformed(self, value):
        """Out of range or malformed times name the offending field"""
        with pytest.raises(InvalidTimeFormatException) as exc:
            DateService.parse_time(value, "time_to")
        assert exc.value.field == "time_to"


class TestWeekKeyAndMidnight:
    """Tests for week_key and normalize_to_midnight"""

    def test_week_key_uses_iso_calendar(self):
        """Week keys follow the ISO calendar across year ends"""
        assert DateService.week_key(date(2024, 1, 1)) == (2024, 1)
        # Sunday 2023-01-01 belongs to the last ISO week of 2022
        assert DateService.week_key(date(2023, 1, 1)) == (2022, 52)
        assert DateService.week_key(date(2020, 12, 31)) == (2020, 53)

    def test_monday_and_sunday_share_a_week(self):
        """A week runs from Monday to Sunday"""
        assert DateService.week_key(date(2024, 1, 8)) == DateService.week_key(date(2024, 1, 14))
        assert DateService.week_key(date(2024, 1, 14)) != DateService.week_key(date(2024, 1, 15))

    def test_normalize_to_midnight(self):
        """The time of day is dropped"""
        assert DateService.normalize_to_midnight(datetime(2024, 1, 5, 17, 45)) == datetime(2024, 1, 5)
