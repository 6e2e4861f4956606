"""
Tests for StatusService.

Tests cover:
1. Evaluation order (completed, weekly, grace periods, yesterday gate, time gate)
2. Due time and window semantics
3. Time configuration validation
"""
import pytest
from datetime import datetime, timedelta
from types import SimpleNamespace

from streakmate.services.status_service import HabitSnapshot, StatusService
from streakmate.exceptions import (
    InvalidTimeFormatException, ValidationException, InvalidDateFormatException
)
from streakmate.tests.conftest import days_ago


def snapshot(now, **overrides):
    """Daily habit created a month ago with yesterday completed"""
    values = {
        "frequency": "daily",
        "completed_dates": tuple(days_ago(now.date(), 1)),
        "created_at": now - timedelta(days=30),
    }
    values.update(overrides)
    return HabitSnapshot(**values)


class TestEvaluationOrder:
    """Tests for the order of rules in resolve_status"""

    def test_completed_today_wins_over_time(self, now, today):
        """Completing today overrides a passed due time"""
        habit = snapshot(now, completed_dates=tuple(days_ago(today, 0)), time="06:00", time_to="07:00")
        assert StatusService.resolve_status(habit, now) == "completed"

    def test_completed_today_even_when_yesterday_missing(self, now, today):
        """Completing today overrides a skipped yesterday"""
        habit = snapshot(now, completed_dates=tuple(days_ago(today, 0, 5)))
        assert StatusService.resolve_status(habit, now) == "completed"

    def test_yesterday_missing_is_missed_without_time(self, now):
        """A skipped yesterday misses a daily habit with no time set"""
        habit = snapshot(now, completed_dates=())
        assert StatusService.resolve_status(habit, now) == "missed"

    def test_yesterday_done_and_no_time_is_pending(self, now):
        """Yesterday done and no time set stays pending"""
        assert StatusService.resolve_status(snapshot(now), now) == "pending"

    def test_weekly_never_auto_misses(self, now):
        """Weekly habits stay pending whatever their history or time"""
        habit = snapshot(now, frequency="weekly", target=3, completed_dates=(), time="06:00")
        assert StatusService.resolve_status(habit, now) == "pending"

    def test_weekly_completed_today(self, now, today):
        """A weekly habit done today is completed"""
        habit = snapshot(now, frequency="weekly", completed_dates=tuple(days_ago(today, 0)))
        assert StatusService.resolve_status(habit, now) == "completed"

    def test_unknown_frequency(self, now):
        """An unsupported frequency is rejected"""
        with pytest.raises(ValidationException):
            StatusService.resolve_status(snapshot(now, frequency="hourly"), now)

    def test_bad_completion_date(self, now):
        """A malformed completion date is rejected"""
        with pytest.raises(InvalidDateFormatException):
            StatusService.resolve_status(snapshot(now, completed_dates=("not-a-date",)), now)

    def test_plain_date_rejected(self, now, today):
        """A date without a time of day cannot be checked against due times"""
        with pytest.raises(ValidationException) as exc:
            StatusService.resolve_status(snapshot(now), today)
        assert exc.value.field == "now"

    def test_accepts_orm_like_object(self, now, today):
        """Anything with the habit attributes can be resolved"""
        habit = SimpleNamespace(
            frequency="daily", target=1, completed_dates=days_ago(today, 1),
            created_at=now - timedelta(days=10), time="", time_from="", time_to="",
            status="pending", streak=1,
        )
        assert StatusService.resolve_status(habit, now) == "pending"


class TestCreationGrace:
    """Habits created today or yesterday are never missed"""

    def test_created_today(self, now):
        """A habit created an hour ago is pending despite a passed due time"""
        habit = snapshot(now, completed_dates=(), created_at=now - timedelta(hours=1), time="06:00")
        assert StatusService.resolve_status(habit, now) == "pending"

    def test_created_yesterday(self, now):
        """A habit created yesterday is pending without any completions"""
        habit = snapshot(now, completed_dates=(), created_at=now - timedelta(days=1))
        assert StatusService.resolve_status(habit, now) == "pending"

    def test_created_two_days_ago(self, now):
        """A habit created two days ago can be missed"""
        habit = snapshot(now, completed_dates=(), created_at=now - timedelta(days=2))
        assert StatusService.resolve_status(habit, now) == "missed"

    def test_unknown_creation_time_counts_as_new(self, now):
        """A habit with no creation time is treated as new"""
        habit = snapshot(now, completed_dates=(), created_at=None)
        assert StatusService.resolve_status(habit, now) == "pending"

    def test_is_new_habit_boundary(self, today):
        """Creation grace covers yesterday's midnight but not the day before"""
        assert StatusService.is_new_habit(datetime.combine(today - timedelta(days=1), datetime.min.time()), today)
        assert not StatusService.is_new_habit(datetime.combine(today - timedelta(days=2), datetime.max.time()), today)


class TestRestoreGrace:
    """A restore shields the habit for 24 hours"""

    def test_recent_restore_is_pending(self, now):
        """A restore two hours ago keeps the habit pending past its due time"""
        habit = snapshot(now, completed_dates=(), restored_at=now - timedelta(hours=2), time="06:00")
        assert StatusService.resolve_status(habit, now) == "pending"

    def test_expired_restore_is_missed(self, now):
        """A restore more than a day old no longer protects the habit"""
        habit = snapshot(now, completed_dates=(), restored_at=now - timedelta(hours=25))
        assert StatusService.resolve_status(habit, now) == "missed"

    def test_in_restore_grace_boundary(self, now):
        """Restore grace ends exactly 24 hours after the restore"""
        assert StatusService.in_restore_grace(now - timedelta(hours=23, minutes=59), now)
        assert not StatusService.in_restore_grace(now - timedelta(hours=24), now)
        assert not StatusService.in_restore_grace(None, now)


class TestTimeGate:
    """now is 10:00 (600 minutes)"""

    def test_due_time_is_strict(self, now):
        """A single due time is missed only after the minute passes"""
        assert StatusService.resolve_status(snapshot(now, time="10:00"), now) == "pending"
        assert StatusService.resolve_status(snapshot(now, time="09:59"), now) == "missed"

    def test_window_end_is_inclusive(self, now):
        """The window end is missed on the minute itself"""
        assert StatusService.resolve_status(snapshot(now, time_from="08:00", time_to="10:00"), now) == "missed"
        assert StatusService.resolve_status(snapshot(now, time_from="08:00", time_to="10:01"), now) == "pending"

    def test_window_end_alone(self, now):
        """A window end without a start is a deadline"""
        assert StatusService.resolve_status(snapshot(now, time_to="09:00"), now) == "missed"

    def test_window_takes_precedence_over_time(self, now):
        """The window end is used instead of the single time"""
        habit = snapshot(now, time="06:00", time_from="08:00", time_to="12:00")
        assert StatusService.resolve_status(habit, now) == "pending"

    def test_window_start_alone_has_no_deadline(self, now):
        """A window start without an end sets no deadline"""
        assert StatusService.resolve_status(snapshot(now, time_from="06:00"), now) == "pending"

    def test_future_time_is_pending(self, now):
        """A due time later today keeps the habit pending"""
        assert StatusService.resolve_status(snapshot(now, time="21:00"), now) == "pending"


class TestDueWindow:
    """Tests for parse_due_window"""

    def test_no_times(self):
        """No times means no deadline"""
        window = StatusService.parse_due_window()
        assert window.due_minutes is None

    def test_single_time(self):
        """A single time is a strict deadline"""
        window = StatusService.parse_due_window(time="07:30")
        assert window.due_minutes == 450
        assert not window.inclusive

    def test_window(self):
        """A window's end is an inclusive deadline"""
        window = StatusService.parse_due_window(time_from="07:00", time_to="08:15")
        assert window.due_minutes == 495
        assert window.inclusive

    def test_inverted_window(self):
        """A window that ends before it starts is rejected"""
        with pytest.raises(ValidationException) as exc:
            StatusService.parse_due_window(time_from="09:00", time_to="08:00")
        assert exc.value.field == "time_from"

    def test_malformed_time_names_field(self):
        """A malformed time names its field"""
        with pytest.raises(InvalidTimeFormatException) as exc:
            StatusService.parse_due_window(time_to="25:00")
        assert exc.value.field == "time_to"

    def test_malformed_time_raised_by_resolve(self, now):
        """resolve_status surfaces malformed times"""
        with pytest.raises(InvalidTimeFormatException):
            StatusService.resolve_status(snapshot(now, time="9am"), now)
