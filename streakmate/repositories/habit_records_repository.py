"""
Habit records repository - Data access layer for records that reference a habit.
Handles missed-streak explanations, restores, notifications and emotion logs.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_

from streakmate.models import MissedStreak, StreakRestore, Notification, EmotionLog


class MissedStreakRepository:
    """Repository for MissedStreak data access"""

    @staticmethod
    def get_history(db: Session, user_id: int, habit_id: Optional[int] = None) -> List[MissedStreak]:
        """Get explanations of a user, newest first"""
        query = db.query(MissedStreak).filter(MissedStreak.user_id == user_id)
        if habit_id is not None:
            query = query.filter(MissedStreak.habit_id == habit_id)
        return query.order_by(MissedStreak.date.desc(), MissedStreak.id.desc()).all()

    @staticmethod
    def create(db: Session, entry: MissedStreak) -> MissedStreak:
        """Create new explanation"""
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def delete_for_habit(db: Session, habit_id: int) -> int:
        """Delete all explanations of a habit"""
        deleted = db.query(MissedStreak).filter(MissedStreak.habit_id == habit_id).delete()
        db.commit()
        return deleted


class StreakRestoreRepository:
    """Repository for StreakRestore data access"""

    @staticmethod
    def count_for_month(db: Session, user_id: int, month: int, year: int) -> int:
        """Count restores used by a user in a month"""
        return db.query(StreakRestore).filter(
            and_(
                StreakRestore.user_id == user_id,
                StreakRestore.month == month,
                StreakRestore.year == year
            )
        ).count()

    @staticmethod
    def add(db: Session, restore: StreakRestore) -> StreakRestore:
        """Record a restore without committing"""
        db.add(restore)
        return restore

    @staticmethod
    def delete_for_habit(db: Session, habit_id: int) -> int:
        """Delete all restores of a habit"""
        deleted = db.query(StreakRestore).filter(StreakRestore.habit_id == habit_id).delete()
        db.commit()
        return deleted


class NotificationRepository:
    """Repository for Notification data access"""

    @staticmethod
    def get_for_user(db: Session, user_id: int, unread_only: bool = False) -> List[Notification]:
        """Get notifications of a user, newest first"""
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.read == False)
        return query.order_by(Notification.date.desc(), Notification.id.desc()).all()

    @staticmethod
    def get_for_user_by_id(db: Session, user_id: int, notification_id: int) -> Optional[Notification]:
        """Get notification by ID, only if it belongs to the user"""
        return db.query(Notification).filter(
            and_(
                Notification.id == notification_id,
                Notification.user_id == user_id
            )
        ).first()

    @staticmethod
    def create(db: Session, notification: Notification) -> Notification:
        """Create new notification"""
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def update(db: Session, notification: Notification) -> Notification:
        """Update existing notification"""
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def delete_for_habit(db: Session, habit_id: int) -> int:
        """Delete all notifications referencing a habit"""
        deleted = db.query(Notification).filter(Notification.habit_id == habit_id).delete()
        db.commit()
        return deleted


class EmotionLogRepository:
    """Repository for EmotionLog data access"""

    @staticmethod
    def delete_for_habit(db: Session, habit_id: int) -> int:
        """Delete all emotion logs referencing a habit"""
        deleted = db.query(EmotionLog).filter(EmotionLog.habit_id == habit_id).delete()
        db.commit()
        return deleted
