"""
Date calculation and parsing service.
Handles boundary formats (YYYY-MM-DD dates, HH:MM times) and week keys.
"""
import re
from datetime import datetime, date
from typing import Iterable, Optional, Set, Tuple

from streakmate.constants import DATE_FORMAT
from streakmate.exceptions import InvalidDateFormatException, InvalidTimeFormatException

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def now() -> datetime:
        """Current local time. Services fall back to this when no `now` is passed in."""
        return datetime.now()

    @staticmethod
    def parse_date(value, field: str = "date") -> date:
        """
        Normalize a calendar date value to a date (time of day stripped).

        Accepts date and datetime objects, "YYYY-MM-DD" strings and
        ISO-8601 timestamp strings.

        Args:
            value: Value to normalize
            field: Field name reported in the error

        Returns:
            Calendar date

        Raises:
            InvalidDateFormatException: If the value cannot be parsed
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            raise InvalidDateFormatException(field, value)

        text = value.strip()
        try:
            if _DATE_RE.match(text):
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            raise InvalidDateFormatException(field, value)

    @staticmethod
    def parse_date_set(values: Optional[Iterable], field: str = "completed_dates") -> Set[date]:
        """Normalize a collection of completion values into a set of dates"""
        if not values:
            return set()
        return {DateService.parse_date(value, field) for value in values}

    @staticmethod
    def format_date(value: date) -> str:
        """Format a date as YYYY-MM-DD"""
        return value.strftime(DATE_FORMAT)

    @staticmethod
    def parse_time(time_str: Optional[str], field: str = "time") -> Optional[int]:
        """
        Parse "HH:MM" into minutes since midnight.

        Empty string and None mean "no time configured" and return None.

        Raises:
            InvalidTimeFormatException: If time string is invalid
        """
        if time_str is None:
            return None
        if not isinstance(time_str, str):
            raise InvalidTimeFormatException(field, time_str)
        text = time_str.strip()
        if not text:
            return None

        match = _TIME_RE.match(text)
        if not match:
            raise InvalidTimeFormatException(field, time_str)
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise InvalidTimeFormatException(field, time_str)
        return hour * 60 + minute

    @staticmethod
    def minutes_since_midnight(moment: datetime) -> int:
        """Whole minutes elapsed since local midnight"""
        return moment.hour * 60 + moment.minute

    @staticmethod
    def week_key(value: date) -> Tuple[int, int]:
        """ISO (year, week) bucket for a date"""
        iso = value.isocalendar()
        return iso[0], iso[1]

    @staticmethod
    def normalize_to_midnight(dt: datetime) -> datetime:
        """
        Normalize datetime to midnight (remove time component).

        Args:
            dt: Datetime to normalize

        Returns:
            Datetime set to midnight
        """
        return datetime.combine(dt.date(), datetime.min.time())
