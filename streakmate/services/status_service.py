"""
Status resolution service.
Derives a habit's lifecycle status (pending / completed / missed) for the current day.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from streakmate.constants import (
    FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCIES,
    STATUS_PENDING, STATUS_COMPLETED, STATUS_MISSED,
    RESTORE_GRACE_PERIOD
)
from streakmate.exceptions import ValidationException
from streakmate.services.date_service import DateService


@dataclass(frozen=True)
class HabitSnapshot:
    """Read-only projection of the habit fields the engine needs"""
    frequency: str
    target: int = 1
    completed_dates: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    time: str = ""
    time_from: str = ""
    time_to: str = ""
    status: str = STATUS_PENDING
    streak: int = 0
    restored_at: Optional[datetime] = None
    id: Optional[int] = None
    user_id: Optional[int] = None

    @classmethod
    def from_model(cls, habit) -> "HabitSnapshot":
        """Build a snapshot from a Habit row (or any object with the same attributes)"""
        return cls(
            frequency=habit.frequency,
            target=habit.target if habit.target is not None else 1,
            completed_dates=tuple(habit.completed_dates or ()),
            created_at=habit.created_at,
            time=habit.time or "",
            time_from=habit.time_from or "",
            time_to=habit.time_to or "",
            status=habit.status or STATUS_PENDING,
            streak=habit.streak or 0,
            restored_at=getattr(habit, "restored_at", None),
            id=getattr(habit, "id", None),
            user_id=getattr(habit, "user_id", None),
        )


@dataclass(frozen=True)
class DueWindow:
    """Parsed time-of-day configuration, in minutes since midnight"""
    due_minutes: Optional[int]
    inclusive: bool  # True: missed at due time (window end); False: missed after it


class StatusService:
    """Service for habit status resolution"""

    @staticmethod
    def parse_due_window(time: str = "", time_from: str = "", time_to: str = "") -> DueWindow:
        """
        Validate time-of-day fields and work out when the habit is due.

        A window (time_from/time_to) is due by time_to, inclusive.
        A single time is a strict due instant. time_from alone has no deadline.

        Raises:
            InvalidTimeFormatException: If any time string is malformed
            ValidationException: If time_from is later than time_to
        """
        single = DateService.parse_time(time, "time")
        window_start = DateService.parse_time(time_from, "time_from")
        window_end = DateService.parse_time(time_to, "time_to")

        if window_start is not None and window_end is not None and window_start > window_end:
            raise ValidationException("time_from", "must not be later than time_to")

        if window_end is not None:
            return DueWindow(due_minutes=window_end, inclusive=True)
        if single is not None:
            return DueWindow(due_minutes=single, inclusive=False)
        return DueWindow(due_minutes=None, inclusive=False)

    @staticmethod
    def is_new_habit(created_at: Optional[datetime], today: date) -> bool:
        """Habits created today or yesterday are not held to yesterday's completion"""
        if created_at is None:
            return True
        return created_at.date() >= today - timedelta(days=1)

    @staticmethod
    def in_restore_grace(restored_at: Optional[datetime], now: datetime) -> bool:
        """A restore shields the habit from miss detection for one day"""
        if restored_at is None:
            return False
        return now - restored_at < RESTORE_GRACE_PERIOD

    @staticmethod
    def resolve_status(habit, now: datetime) -> str:
        """
        Resolve the habit's status as of `now`.

        Order of evaluation:
        1. Today completed -> completed
        2. Weekly habits -> pending (they never auto-miss)
        3. Restored within the grace period -> pending
        4. Created today or yesterday -> pending
        5. Daily habit with yesterday not completed -> missed
        6. Past today's due time -> missed
        7. Otherwise -> pending

        Args:
            habit: HabitSnapshot, or a Habit row
            now: Reference moment (local time)

        Returns:
            "pending", "completed" or "missed"

        Raises:
            InvalidDateFormatException: If a completion date cannot be parsed
            InvalidTimeFormatException: If a time field is malformed
            ValidationException: If frequency or time window is invalid, or now is a
                plain date without a time of day
        """
        snapshot = habit if isinstance(habit, HabitSnapshot) else HabitSnapshot.from_model(habit)

        if not isinstance(now, datetime):
            raise ValidationException("now", "must be a datetime with a time of day")

        if snapshot.frequency not in FREQUENCIES:
            raise ValidationException(
                "frequency", f"must be daily or weekly, got {snapshot.frequency!r}"
            )

        days = DateService.parse_date_set(snapshot.completed_dates)
        window = StatusService.parse_due_window(
            snapshot.time, snapshot.time_from, snapshot.time_to
        )
        today = now.date()

        if today in days:
            return STATUS_COMPLETED

        if snapshot.frequency == FREQUENCY_WEEKLY:
            return STATUS_PENDING

        if StatusService.in_restore_grace(snapshot.restored_at, now):
            return STATUS_PENDING

        if StatusService.is_new_habit(snapshot.created_at, today):
            return STATUS_PENDING

        if snapshot.frequency == FREQUENCY_DAILY and today - timedelta(days=1) not in days:
            return STATUS_MISSED

        if window.due_minutes is not None:
            current = DateService.minutes_since_midnight(now)
            if window.inclusive and current >= window.due_minutes:
                return STATUS_MISSED
            if not window.inclusive and current > window.due_minutes:
                return STATUS_MISSED

        return STATUS_PENDING
