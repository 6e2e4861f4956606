"""
Habit management service.
Handles habit CRUD and completion marking; streak and status always come from the engine.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from streakmate.models import Habit
from streakmate.schemas import HabitCreate, HabitUpdate
from streakmate.repositories.habit_repository import HabitRepository
from streakmate.services.cleanup_service import CleanupService
from streakmate.services.date_service import DateService
from streakmate.services.event_service import EventBus
from streakmate.services.notification_service import NotificationService
from streakmate.services.status_service import HabitSnapshot, StatusService
from streakmate.services.streak_service import StreakService
from streakmate.exceptions import (
    HabitNotFoundException, HabitMissedException, ValidationException
)
from streakmate.constants import (
    FREQUENCY_WEEKLY, STATUS_PENDING, STATUS_MISSED,
    EVENT_STATUS_CHANGED, EVENT_HABIT_DELETED
)

logger = logging.getLogger("streakmate.habits")


class HabitService:
    """Service for habit management"""

    def __init__(self, db: Session, events: Optional[EventBus] = None):
        self.db = db
        self.events = events
        self.habit_repo = HabitRepository()
        self.notifications = NotificationService(db)

    def get_habit(self, user_id: int, habit_id: int) -> Habit:
        """Get a habit owned by the user"""
        habit = self.habit_repo.get_for_user(self.db, user_id, habit_id)
        if not habit:
            raise HabitNotFoundException(habit_id)
        return habit

    def list_habits(self, user_id: int, now: Optional[datetime] = None) -> List[Habit]:
        """Get all habits of the user with streak and status brought up to date"""
        now = now or DateService.now()
        habits = self.habit_repo.get_all_for_user(self.db, user_id)
        for habit in habits:
            self.refresh(habit, now)
        return habits

    def create_habit(
        self,
        user_id: int,
        habit_data: HabitCreate,
        now: Optional[datetime] = None
    ) -> Habit:
        """Create a new habit (pending, no streak)"""
        now = now or DateService.now()
        values = habit_data.model_dump()
        self._validate(values)

        habit = Habit(**values)
        habit.user_id = user_id
        habit.target = values["target"] if values["frequency"] == FREQUENCY_WEEKLY else 1
        habit.completed_dates = []
        habit.status = STATUS_PENDING
        habit.streak = 0
        habit.created_at = now
        habit.status_updated_at = now

        habit = self.habit_repo.create(self.db, habit)
        logger.info(f"Created {habit.frequency} habit {habit.id} for user {user_id}")
        return habit

    def update_habit(
        self,
        user_id: int,
        habit_id: int,
        habit_update: HabitUpdate,
        now: Optional[datetime] = None
    ) -> Habit:
        """Update habit settings and re-derive streak and status"""
        now = now or DateService.now()
        habit = self.get_habit(user_id, habit_id)

        update_data = habit_update.model_dump(exclude_unset=True)
        merged = {
            "frequency": habit.frequency,
            "target": habit.target,
            "time": habit.time,
            "time_from": habit.time_from,
            "time_to": habit.time_to,
        }
        merged.update({k: v for k, v in update_data.items() if v is not None})
        self._validate(merged)

        for key, value in update_data.items():
            if value is not None:
                setattr(habit, key, value)
        if habit.frequency != FREQUENCY_WEEKLY:
            habit.target = 1

        return self.refresh(habit, now, save=True)

    def set_completion(
        self,
        user_id: int,
        habit_id: int,
        day: str,
        completed: bool,
        now: Optional[datetime] = None
    ) -> Habit:
        """
        Mark or unmark a calendar day as completed.

        Args:
            user_id: Owner of the habit
            habit_id: Habit to update
            day: Date in YYYY-MM-DD format
            completed: True to mark, False to unmark
            now: Reference moment

        Returns:
            Updated habit

        Raises:
            HabitNotFoundException: If the habit does not exist
            InvalidDateFormatException: If day is not a valid date
            ValidationException: If day is in the future
            HabitMissedException: If marking a missed habit (restore it first)
        """
        now = now or DateService.now()
        habit = self.get_habit(user_id, habit_id)
        target_day = DateService.parse_date(day, "date")

        if target_day > now.date():
            raise ValidationException("date", "cannot be in the future")

        dates = set(habit.completed_dates)
        key = DateService.format_date(target_day)
        if completed:
            if habit.status == STATUS_MISSED:
                raise HabitMissedException(habit_id)
            dates.add(key)
        else:
            dates.discard(key)
        habit.completed_dates = dates

        return self.refresh(habit, now, save=True)

    def delete_habit(self, user_id: int, habit_id: int) -> List[str]:
        """
        Delete a habit with its dependent records.

        Returns:
            Dependent tables whose cleanup failed
        """
        habit = self.get_habit(user_id, habit_id)
        failed_tables = CleanupService(self.db).delete_habit(habit)
        logger.info(f"Deleted habit {habit_id} of user {user_id}")
        self._publish(EVENT_HABIT_DELETED, {"habit_id": habit_id, "user_id": user_id})
        return failed_tables

    def get_stats(self, user_id: int, now: Optional[datetime] = None) -> dict:
        """Aggregate streak statistics for the user's habits"""
        now = now or DateService.now()
        habits = self.list_habits(user_id, now)
        stats = StreakService.summarize(
            [HabitSnapshot.from_model(habit) for habit in habits], now
        )
        stats["total_habits"] = len(habits)
        stats["missed_habits"] = sum(1 for habit in habits if habit.status == STATUS_MISSED)
        return stats

    def refresh(self, habit: Habit, now: datetime, save: bool = False) -> Habit:
        """
        Re-derive streak and status and persist them if anything changed.

        A missed habit stays missed here: only a restore moves it back.
        The status write is conditioned on the status read, like the sweeper's,
        so a transition the sweeper persisted meanwhile is kept and not repeated.
        """
        dirty, change = self._recompute(habit, now)
        if change is None:
            if dirty or save:
                habit = self.habit_repo.update(self.db, habit)
            return habit

        habit_id = habit.id
        old_status, new_status = change
        # Commit also flushes the other pending column changes (dates, streak, settings)
        written = self.habit_repo.update_status_if(
            self.db,
            habit_id,
            old_status,
            {
                Habit.status: new_status,
                Habit.status_updated_at: now,
            }
        )
        self.db.refresh(habit)
        if not written:
            logger.info(f"Habit {habit_id} changed concurrently, keeping status {habit.status}")
            return habit

        logger.info(f"Habit {habit_id}: {old_status} -> {new_status}")
        if new_status == STATUS_MISSED:
            self.notifications.notify_missed(habit, now)
        self._publish(EVENT_STATUS_CHANGED, {
            "habit_id": habit_id,
            "user_id": habit.user_id,
            "old_status": old_status,
            "new_status": new_status,
        })
        return habit

    def _recompute(self, habit: Habit, now: datetime) -> Tuple[bool, Optional[Tuple[str, str]]]:
        """
        Apply the engine's streak to the row and resolve its status.

        The status itself is left for refresh to write conditionally.

        Returns:
            (streak changed, (old, new) status or None)
        """
        snapshot = HabitSnapshot.from_model(habit)
        streak = StreakService.compute_streak(
            snapshot.completed_dates, snapshot.frequency, snapshot.target, now
        )
        dirty = habit.streak != streak
        if dirty:
            habit.streak = streak

        if snapshot.status == STATUS_MISSED:
            return dirty, None

        status = StatusService.resolve_status(snapshot, now)
        if status == snapshot.status:
            return dirty, None
        return dirty, (snapshot.status, status)

    def _validate(self, values: dict) -> None:
        StatusService.parse_due_window(
            values.get("time") or "",
            values.get("time_from") or "",
            values.get("time_to") or "",
        )

    def _publish(self, event_type: str, payload: dict) -> None:
        if self.events is not None:
            self.events.publish(event_type, payload)
