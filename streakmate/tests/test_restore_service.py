"""
Tests for RestoreService.

Tests cover:
1. Monthly restore allowance
2. Restore preconditions
3. Grace period protecting a restored habit from the next sweep
"""
import pytest
from datetime import datetime, timedelta

from streakmate.models import Habit, StreakRestore
from streakmate.services.event_service import EventBus
from streakmate.services.restore_service import RestoreService
from streakmate.services.sweep_service import SweepService
from streakmate.exceptions import (
    HabitNotFoundException, HabitNotMissedException,
    HabitAlreadyCompletedException, RestoreQuotaExceededException
)
from streakmate.tests.conftest import days_ago


def use_chances(db_session, count, month=1, year=2024, user_id=1):
    for _ in range(count):
        db_session.add(StreakRestore(user_id=user_id, habit_id=99, month=month, year=year))
    db_session.commit()


class TestChances:
    """Tests for get_chances"""

    def test_fresh_month(self, db_session, now):
        """A new month starts with the full allowance"""
        assert RestoreService(db_session).get_chances(1, now) == {
            "restore_chances": 5,
            "used_chances": 0,
            "month": 1,
            "year": 2024,
        }

    def test_counts_only_current_month_and_user(self, db_session, now):
        """Only this user's restores in this month count"""
        use_chances(db_session, 2)
        use_chances(db_session, 3, month=12, year=2023)
        use_chances(db_session, 4, user_id=2)

        chances = RestoreService(db_session).get_chances(1, now)

        assert chances["used_chances"] == 2
        assert chances["restore_chances"] == 3


class TestRestore:
    """Tests for restore"""

    def test_restores_missed_habit(self, db_session, make_habit, now):
        """A restore moves missed to pending, spends a chance and publishes the change"""
        events = EventBus()
        received = []
        events.subscribe(lambda event_type, payload: received.append((event_type, payload)))
        habit = make_habit(status="missed", streak=0)

        result = RestoreService(db_session, events).restore(1, habit.id, now)

        assert result == {
            "message": "Streak restored successfully",
            "restore_chances": 4,
            "used_chances": 1,
            "habit_name": "Read",
        }
        db_session.expire_all()
        stored = db_session.get(Habit, habit.id)
        assert stored.status == "pending"
        assert stored.restored_at == now
        assert stored.status_updated_at == now
        assert db_session.query(StreakRestore).filter(StreakRestore.habit_id == habit.id).count() == 1
        assert received == [(
            "habit_status_changed",
            {"habit_id": habit.id, "user_id": 1, "old_status": "missed", "new_status": "pending"},
        )]

    def test_quota_exhausted(self, db_session, make_habit, now):
        """No restore happens once the month's chances are spent"""
        use_chances(db_session, 5)
        habit = make_habit(status="missed")

        with pytest.raises(RestoreQuotaExceededException):
            RestoreService(db_session).restore(1, habit.id, now)

        db_session.expire_all()
        assert db_session.get(Habit, habit.id).status == "missed"

    def test_quota_resets_next_month(self, db_session, make_habit):
        """Last month's restores do not count against this month"""
        use_chances(db_session, 5, month=1, year=2024)
        habit = make_habit(status="missed")

        result = RestoreService(db_session).restore(1, habit.id, datetime(2024, 2, 1, 9, 0))

        assert result["used_chances"] == 1

    def test_unknown_habit(self, db_session, now):
        """Restoring an unknown habit fails"""
        with pytest.raises(HabitNotFoundException):
            RestoreService(db_session).restore(1, 42, now)

    def test_not_missed(self, db_session, make_habit, now):
        """Only missed habits can be restored"""
        habit = make_habit(status="pending")
        with pytest.raises(HabitNotMissedException):
            RestoreService(db_session).restore(1, habit.id, now)
        assert db_session.query(StreakRestore).count() == 0

    def test_completed_today(self, db_session, make_habit, now, today):
        """A habit done today has nothing to restore"""
        habit = make_habit(status="completed", completed_dates=days_ago(today, 0))
        with pytest.raises(HabitAlreadyCompletedException):
            RestoreService(db_session).restore(1, habit.id, now)


class TestRestoreGrace:
    """A restored habit is not marked missed again by the next sweep"""

    def test_sweep_respects_grace_period(self, db_session, make_habit, now, today):
        """The sweep leaves a restored habit alone for 24 hours"""
        habit = make_habit(status="missed", completed_dates=days_ago(today, 3))
        habit_id = habit.id
        RestoreService(db_session).restore(1, habit_id, now)

        result = SweepService(db_session).sweep_statuses(now + timedelta(minutes=1))
        assert result.updated == []

        result = SweepService(db_session).sweep_statuses(now + timedelta(hours=25))
        assert result.updated == [habit_id]
        db_session.expire_all()
        assert db_session.get(Habit, habit_id).status == "missed"
