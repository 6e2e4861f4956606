"""
Habit cleanup service.
Hard-deletes a habit, then removes the records that reference it on a best-effort basis.
"""
import logging
from typing import List
from sqlalchemy.orm import Session

from streakmate.models import Habit
from streakmate.repositories.habit_repository import HabitRepository
from streakmate.repositories.habit_records_repository import (
    MissedStreakRepository, StreakRestoreRepository,
    NotificationRepository, EmotionLogRepository
)

logger = logging.getLogger("streakmate.cleanup")

# Records cascade-deleted with a habit, in deletion order
DEPENDENT_RECORDS = (
    ("missed_streaks", MissedStreakRepository),
    ("streak_restores", StreakRestoreRepository),
    ("notifications", NotificationRepository),
    ("emotion_logs", EmotionLogRepository),
)


class CleanupService:
    """Service for habit deletion with cascading cleanup"""

    def __init__(self, db: Session):
        self.db = db
        self.habit_repo = HabitRepository()

    def delete_habit(self, habit: Habit) -> List[str]:
        """
        Delete a habit and its dependent records.

        The habit deletion is committed first and is authoritative: if it
        fails the exception propagates. Dependent records are deleted one
        table at a time; a failing table is rolled back and logged, and the
        remaining tables are still processed.

        Args:
            habit: Habit to delete

        Returns:
            Names of dependent tables whose cleanup failed
        """
        habit_id = habit.id
        self.habit_repo.delete(self.db, habit)
        return self.delete_dependents(habit_id)

    def delete_dependents(self, habit_id: int) -> List[str]:
        """Delete records referencing habit_id; returns tables that failed"""
        failed = []
        for table, repository in DEPENDENT_RECORDS:
            try:
                deleted = repository.delete_for_habit(self.db, habit_id)
                if deleted:
                    logger.info(f"Deleted {deleted} {table} of habit {habit_id}")
            except Exception as e:
                self.db.rollback()
                failed.append(table)
                logger.error(f"Cascade delete of {table} for habit {habit_id} failed: {e}")
        return failed
