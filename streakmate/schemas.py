from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal, Optional

from streakmate.constants import DEFAULT_EMOJI, DEFAULT_ICON, HABIT_NAME_MAX_LENGTH


class HabitBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=HABIT_NAME_MAX_LENGTH)
    description: str = Field(default="", max_length=500)
    emoji: str = Field(default=DEFAULT_EMOJI, min_length=1)
    icon: str = DEFAULT_ICON
    frequency: Literal["daily", "weekly"] = "daily"
    target: int = Field(default=1, ge=1, le=7)  # Completions per week (weekly only)

    # Time of day, "HH:MM" or "" for none
    time: str = Field(default="", max_length=5)
    time_from: str = Field(default="", max_length=5)
    time_to: str = Field(default="", max_length=5)


class HabitCreate(HabitBase):
    pass


class HabitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=HABIT_NAME_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=500)
    emoji: Optional[str] = Field(None, min_length=1)
    icon: Optional[str] = None
    frequency: Optional[Literal["daily", "weekly"]] = None
    target: Optional[int] = Field(None, ge=1, le=7)
    time: Optional[str] = Field(None, max_length=5)
    time_from: Optional[str] = Field(None, max_length=5)
    time_to: Optional[str] = Field(None, max_length=5)


class HabitResponse(HabitBase):
    id: int
    user_id: int
    status: str
    streak: int = 0
    completed_dates: List[str] = []
    created_at: datetime
    status_updated_at: Optional[datetime] = None
    restored_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CompletionUpdate(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")  # YYYY-MM-DD
    completed: bool


class HabitStatsResponse(BaseModel):
    total_habits: int
    missed_habits: int
    completed_today: int
    current_streak: int
    longest_streak: int


# Restore schemas
class RestoreRequest(BaseModel):
    habit_id: int


class RestoreChancesResponse(BaseModel):
    restore_chances: int
    used_chances: int
    month: int
    year: int


class RestoreResponse(BaseModel):
    message: str
    restore_chances: int
    used_chances: int
    habit_name: str


# Missed streak schemas
class MissedStreakCreate(BaseModel):
    habit_id: int
    explanation: str = Field(..., min_length=1, max_length=2000)


class MissedStreakResponse(BaseModel):
    id: int
    habit_id: int
    habit_name: str
    date: datetime
    user_explanation: str
    ai_reply: Optional[str] = None

    class Config:
        from_attributes = True


# Notification schemas
class NotificationResponse(BaseModel):
    id: int
    habit_id: Optional[int] = None
    habit_name: Optional[str] = None
    body: Optional[str] = None
    time: Optional[str] = None
    date: datetime
    read: bool = False

    class Config:
        from_attributes = True


# Sweep schemas
class SweepResponse(BaseModel):
    updated: List[int]
    deleted: List[int]
    failed: List[int]
