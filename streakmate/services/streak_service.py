"""
Streak calculation service.
Pure functions over a habit's completion history: no database, no clock of its own.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from streakmate.constants import FREQUENCY_DAILY, FREQUENCY_WEEKLY
from streakmate.exceptions import ValidationException
from streakmate.services.date_service import DateService


def _as_date(now: Union[date, datetime]) -> date:
    return now.date() if isinstance(now, datetime) else now


def _effective_target(target: Optional[int]) -> int:
    """Weekly targets below 1 would make every week qualify"""
    try:
        return max(1, int(target or 1))
    except (TypeError, ValueError):
        raise ValidationException("target", f"must be an integer, got {target!r}")


class StreakService:
    """Service for streak calculation"""

    @staticmethod
    def compute_streak(
        completed_dates: Optional[Iterable],
        frequency: str,
        target: Optional[int],
        now: Union[date, datetime]
    ) -> int:
        """
        Calculate the current streak as of `now`.

        Daily habits count consecutive completed days ending today, or
        ending yesterday when today is not completed yet. Weekly habits
        count consecutive ISO weeks, starting at the current week, that
        reach `target` completions.

        Args:
            completed_dates: Completed calendar days (dates or YYYY-MM-DD strings)
            frequency: "daily" or "weekly"
            target: Completions needed per week (weekly only)
            now: Reference moment

        Returns:
            Streak length (0 when nothing was completed)

        Raises:
            InvalidDateFormatException: If a completion date cannot be parsed
            ValidationException: If frequency is unknown
        """
        days = DateService.parse_date_set(completed_dates)
        today = _as_date(now)

        if frequency == FREQUENCY_DAILY:
            return StreakService._daily_streak(days, today)
        if frequency == FREQUENCY_WEEKLY:
            return StreakService._weekly_streak(days, _effective_target(target), today)
        raise ValidationException("frequency", f"must be daily or weekly, got {frequency!r}")

    @staticmethod
    def _daily_streak(days: set, today: date) -> int:
        if not days:
            return 0

        cursor = today
        if cursor not in days:
            cursor = today - timedelta(days=1)

        streak = 0
        while cursor in days:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    @staticmethod
    def _weekly_counts(days: set) -> dict:
        counts = {}
        for day in days:
            key = DateService.week_key(day)
            counts[key] = counts.get(key, 0) + 1
        return counts

    @staticmethod
    def _weekly_streak(days: set, target: int, today: date) -> int:
        if not days:
            return 0

        counts = StreakService._weekly_counts(days)
        streak = 0
        cursor = today
        while counts.get(DateService.week_key(cursor), 0) >= target:
            streak += 1
            cursor -= timedelta(days=7)
        return streak

    @staticmethod
    def compute_longest_streak(
        completed_dates: Optional[Iterable],
        frequency: str,
        target: Optional[int] = 1
    ) -> int:
        """Longest run of consecutive qualifying days (daily) or weeks (weekly) in the history"""
        days = DateService.parse_date_set(completed_dates)
        if not days:
            return 0

        if frequency == FREQUENCY_DAILY:
            periods = sorted(days)
            step = timedelta(days=1)
        elif frequency == FREQUENCY_WEEKLY:
            goal = _effective_target(target)
            counts = StreakService._weekly_counts(days)
            # Monday of each qualifying ISO week
            periods = sorted(
                date.fromisocalendar(year, week, 1)
                for (year, week), count in counts.items()
                if count >= goal
            )
            step = timedelta(days=7)
        else:
            raise ValidationException("frequency", f"must be daily or weekly, got {frequency!r}")

        longest = 0
        run = 0
        previous = None
        for period in periods:
            run = run + 1 if previous is not None and period - previous == step else 1
            longest = max(longest, run)
            previous = period
        return longest

    @staticmethod
    def summarize(habits: Iterable, now: Union[date, datetime]) -> dict:
        """
        Aggregate streak statistics across habits.

        Args:
            habits: Objects exposing completed_dates, frequency and target
            now: Reference moment

        Returns:
            Dictionary with completed_today, current_streak and longest_streak
        """
        today = _as_date(now)
        completed_today = 0
        current_streak = 0
        longest_streak = 0

        for habit in habits:
            days = DateService.parse_date_set(habit.completed_dates)
            streak = StreakService.compute_streak(days, habit.frequency, habit.target, today)
            longest = StreakService.compute_longest_streak(days, habit.frequency, habit.target)
            longest_streak = max(longest_streak, longest, streak)

            if today in days:
                completed_today += 1
                current_streak = max(current_streak, streak)

        return {
            "completed_today": completed_today,
            "current_streak": current_streak,
            "longest_streak": longest_streak,
        }
