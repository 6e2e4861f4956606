"""
Habit repository - Data access layer for Habit model.
Handles all database queries related to habits.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_

from streakmate.models import Habit
from streakmate.constants import STATUS_PENDING, STATUS_COMPLETED, STATUS_MISSED


class HabitRepository:
    """Repository for Habit data access"""

    @staticmethod
    def get_by_id(db: Session, habit_id: int) -> Optional[Habit]:
        """Get habit by ID"""
        return db.query(Habit).filter(Habit.id == habit_id).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int, habit_id: int) -> Optional[Habit]:
        """Get habit by ID, only if it belongs to the user"""
        return db.query(Habit).filter(
            and_(
                Habit.id == habit_id,
                Habit.user_id == user_id
            )
        ).first()

    @staticmethod
    def get_all_for_user(db: Session, user_id: int) -> List[Habit]:
        """Get all habits of a user"""
        return db.query(Habit).filter(Habit.user_id == user_id).order_by(Habit.id).all()

    @staticmethod
    def get_sweep_candidates(db: Session) -> List[Habit]:
        """Get habits whose status can still change on its own (pending or completed)"""
        return db.query(Habit).filter(
            Habit.status.in_([STATUS_PENDING, STATUS_COMPLETED])
        ).order_by(Habit.id).all()

    @staticmethod
    def get_expired_missed(db: Session, cutoff: datetime) -> List[Habit]:
        """Get habits left missed since before cutoff"""
        return db.query(Habit).filter(
            and_(
                Habit.status == STATUS_MISSED,
                Habit.status_updated_at < cutoff
            )
        ).order_by(Habit.id).all()

    @staticmethod
    def update_status_if(
        db: Session,
        habit_id: int,
        expected_status: str,
        values: dict
    ) -> bool:
        """
        Write values only if the habit still has expected_status.

        Args:
            db: Database session
            habit_id: Habit to update
            expected_status: Status read before the decision was made
            values: Column values to write

        Returns:
            True if the row was updated, False if the status changed meanwhile
        """
        updated = db.query(Habit).filter(
            and_(
                Habit.id == habit_id,
                Habit.status == expected_status
            )
        ).update(values, synchronize_session=False)
        db.commit()
        return updated == 1

    @staticmethod
    def delete_if_expired(db: Session, habit_id: int, cutoff: datetime) -> bool:
        """Delete the habit only if it is still missed since before cutoff"""
        deleted = db.query(Habit).filter(
            and_(
                Habit.id == habit_id,
                Habit.status == STATUS_MISSED,
                Habit.status_updated_at < cutoff
            )
        ).delete(synchronize_session=False)
        db.commit()
        return deleted == 1

    @staticmethod
    def create(db: Session, habit: Habit) -> Habit:
        """Create a new habit"""
        db.add(habit)
        db.commit()
        db.refresh(habit)
        return habit

    @staticmethod
    def update(db: Session, habit: Habit) -> Habit:
        """Update existing habit"""
        db.commit()
        db.refresh(habit)
        return habit

    @staticmethod
    def delete(db: Session, habit: Habit) -> None:
        """Delete a habit"""
        db.delete(habit)
        db.commit()
