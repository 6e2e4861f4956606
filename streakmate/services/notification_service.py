"""
Notification service.
Persists user-facing notices about missed and removed habits.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from streakmate.models import Habit, Notification
from streakmate.repositories.habit_records_repository import NotificationRepository
from streakmate.exceptions import NotificationNotFoundException
from streakmate.services.date_service import DateService


class NotificationService:
    """Service for user notifications"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def notify_missed(self, habit: Habit, now: Optional[datetime] = None) -> Notification:
        """Tell the owner a habit was marked missed"""
        due = habit.time_to or habit.time or None
        notification = Notification(
            user_id=habit.user_id,
            habit_id=habit.id,
            habit_name=habit.name,
            body=f"You missed {habit.name} today. Restore it or tell us what happened.",
            time=due,
            date=now or DateService.now(),
        )
        return self.repo.create(self.db, notification)

    def notify_deleted(
        self,
        user_id: int,
        habit_name: str,
        now: Optional[datetime] = None
    ) -> Notification:
        """Tell the owner a habit was removed after staying missed"""
        notification = Notification(
            user_id=user_id,
            habit_id=None,
            habit_name=habit_name,
            body=f"{habit_name} was removed after staying missed for more than a day.",
            date=now or DateService.now(),
        )
        return self.repo.create(self.db, notification)

    def list_for_user(self, user_id: int, unread_only: bool = False) -> List[Notification]:
        return self.repo.get_for_user(self.db, user_id, unread_only)

    def mark_read(self, user_id: int, notification_id: int) -> Notification:
        """Mark a notification as read"""
        notification = self.repo.get_for_user_by_id(self.db, user_id, notification_id)
        if not notification:
            raise NotificationNotFoundException(notification_id)
        notification.read = True
        return self.repo.update(self.db, notification)
