"""
Streak restore service.
Handles the monthly restore allowance and moving missed habits back to pending.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from streakmate.models import StreakRestore
from streakmate.repositories.habit_repository import HabitRepository
from streakmate.repositories.habit_records_repository import StreakRestoreRepository
from streakmate.services.date_service import DateService
from streakmate.services.event_service import EventBus
from streakmate.exceptions import (
    HabitNotFoundException, HabitNotMissedException,
    HabitAlreadyCompletedException, RestoreQuotaExceededException
)
from streakmate.constants import (
    STATUS_MISSED, STATUS_PENDING, RESTORE_CHANCES_PER_MONTH, EVENT_STATUS_CHANGED
)

logger = logging.getLogger("streakmate.restore")


class RestoreService:
    """Service for streak restores"""

    def __init__(self, db: Session, events: Optional[EventBus] = None):
        self.db = db
        self.events = events
        self.habit_repo = HabitRepository()
        self.restore_repo = StreakRestoreRepository()

    def get_chances(self, user_id: int, now: Optional[datetime] = None) -> dict:
        """Remaining and used restores for the current calendar month"""
        now = now or DateService.now()
        used = self.restore_repo.count_for_month(self.db, user_id, now.month, now.year)
        return {
            "restore_chances": max(0, RESTORE_CHANCES_PER_MONTH - used),
            "used_chances": used,
            "month": now.month,
            "year": now.year,
        }

    def restore(self, user_id: int, habit_id: int, now: Optional[datetime] = None) -> dict:
        """
        Restore a missed habit to pending and spend one monthly chance.

        The habit keeps its completion history; restored_at opens a grace
        period during which it is not marked missed again.

        Args:
            user_id: Owner of the habit
            habit_id: Habit to restore
            now: Reference moment

        Returns:
            dict with message, remaining and used chances, habit name

        Raises:
            RestoreQuotaExceededException: If all chances of the month are used
            HabitNotFoundException: If the habit does not exist
            HabitAlreadyCompletedException: If the habit was completed today
            HabitNotMissedException: If the habit is not missed
        """
        now = now or DateService.now()
        chances = self.get_chances(user_id, now)
        if chances["restore_chances"] <= 0:
            raise RestoreQuotaExceededException(RESTORE_CHANCES_PER_MONTH)

        habit = self.habit_repo.get_for_user(self.db, user_id, habit_id)
        if not habit:
            raise HabitNotFoundException(habit_id)

        if DateService.format_date(now.date()) in habit.completed_dates:
            raise HabitAlreadyCompletedException(habit_id)

        if habit.status != STATUS_MISSED:
            raise HabitNotMissedException(habit_id, habit.status)

        habit.status = STATUS_PENDING
        habit.restored_at = now
        habit.status_updated_at = now
        self.restore_repo.add(self.db, StreakRestore(
            user_id=user_id,
            habit_id=habit_id,
            month=now.month,
            year=now.year,
            restored_at=now,
        ))
        # Status change and quota usage land in one commit
        habit = self.habit_repo.update(self.db, habit)

        used = chances["used_chances"] + 1
        logger.info(f"Restored habit {habit_id} for user {user_id} ({used}/{RESTORE_CHANCES_PER_MONTH} used)")

        if self.events is not None:
            self.events.publish(EVENT_STATUS_CHANGED, {
                "habit_id": habit_id,
                "user_id": user_id,
                "old_status": STATUS_MISSED,
                "new_status": STATUS_PENDING,
            })

        return {
            "message": "Streak restored successfully",
            "restore_chances": max(0, RESTORE_CHANCES_PER_MONTH - used),
            "used_chances": used,
            "habit_name": habit.name,
        }
