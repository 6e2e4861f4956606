import json
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from datetime import datetime

from streakmate.database import Base
from streakmate.constants import (
    FREQUENCY_DAILY, STATUS_PENDING, DEFAULT_EMOJI, DEFAULT_ICON
)


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, default="")
    icon = Column(String, default=DEFAULT_ICON)
    emoji = Column(String, default=DEFAULT_EMOJI)

    frequency = Column(String, default=FREQUENCY_DAILY)  # daily, weekly
    target = Column(Integer, default=1)                   # Completions per week (weekly only)

    # Time of day, "HH:MM" or "" when unset
    time = Column(String, default="")       # Due by this instant
    time_from = Column(String, default="")  # Completion window start
    time_to = Column(String, default="")    # Completion window end (due by)

    # JSON array of "YYYY-MM-DD" strings, see completed_dates
    completed_dates_json = Column("completed_dates", Text, default="[]")

    # Derived values, persisted so readers don't recompute
    status = Column(String, default=STATUS_PENDING, index=True)  # pending, completed, missed
    streak = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.now)
    status_updated_at = Column(DateTime, default=datetime.now)  # Last status transition
    restored_at = Column(DateTime, nullable=True)               # Last manual restore

    @property
    def completed_dates(self) -> list:
        """Completed days as a sorted list without duplicates"""
        if not self.completed_dates_json:
            return []
        return sorted(set(json.loads(self.completed_dates_json)))

    @completed_dates.setter
    def completed_dates(self, values) -> None:
        self.completed_dates_json = json.dumps(sorted(set(values)))


class MissedStreak(Base):
    __tablename__ = "missed_streaks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    habit_id = Column(Integer, nullable=False, index=True)
    habit_name = Column(String, nullable=False)
    date = Column(DateTime, default=datetime.now)
    user_explanation = Column(Text, nullable=False)
    ai_reply = Column(Text, nullable=True)


class StreakRestore(Base):
    """One row per restore; the monthly quota is the row count"""
    __tablename__ = "streak_restores"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    habit_id = Column(Integer, nullable=False, index=True)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    restored_at = Column(DateTime, default=datetime.now)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    habit_id = Column(Integer, nullable=True, index=True)
    habit_name = Column(String, nullable=True)
    body = Column(String, nullable=True)
    time = Column(String, nullable=True)
    date = Column(DateTime, default=datetime.now)
    read = Column(Boolean, default=False)


class EmotionLog(Base):
    __tablename__ = "emotion_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    habit_id = Column(Integer, nullable=True, index=True)
    current_streak = Column(Integer, nullable=False, default=0)
    missed_reason = Column(Text, nullable=True)
    emotion_type = Column(String, nullable=False)  # Proud, Encouraging, Supportive, Concerned
    ai_response = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
