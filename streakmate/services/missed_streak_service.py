"""
Missed streak service.
Records the user's explanation for a missed habit.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from streakmate.models import MissedStreak
from streakmate.repositories.habit_repository import HabitRepository
from streakmate.repositories.habit_records_repository import MissedStreakRepository
from streakmate.services.date_service import DateService
from streakmate.exceptions import (
    HabitNotFoundException, MissedStreakNotAllowedException, ValidationException
)

logger = logging.getLogger("streakmate.missed")


class MissedStreakService:
    """Service for missed streak explanations"""

    def __init__(self, db: Session):
        self.db = db
        self.habit_repo = HabitRepository()
        self.missed_repo = MissedStreakRepository()

    def submit(
        self,
        user_id: int,
        habit_id: int,
        explanation: str,
        now: Optional[datetime] = None
    ) -> MissedStreak:
        """
        Store an explanation for a missed habit.

        Raises:
            ValidationException: If the explanation is blank
            HabitNotFoundException: If the habit does not exist
            MissedStreakNotAllowedException: If the habit was created today or yesterday
        """
        now = now or DateService.now()
        explanation = (explanation or "").strip()
        if not explanation:
            raise ValidationException("explanation", "must not be empty")

        habit = self.habit_repo.get_for_user(self.db, user_id, habit_id)
        if not habit:
            raise HabitNotFoundException(habit_id)

        start_of_yesterday = DateService.normalize_to_midnight(now) - timedelta(days=1)
        if habit.created_at is not None and habit.created_at >= start_of_yesterday:
            raise MissedStreakNotAllowedException(habit_id)

        entry = self.missed_repo.create(self.db, MissedStreak(
            user_id=user_id,
            habit_id=habit_id,
            habit_name=habit.name,
            date=now,
            user_explanation=explanation,
        ))
        logger.info(f"Missed streak explanation saved for habit {habit_id}")
        return entry

    def history(self, user_id: int, habit_id: Optional[int] = None) -> List[MissedStreak]:
        return self.missed_repo.get_history(self.db, user_id, habit_id)
