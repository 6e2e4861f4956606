"""
Missed streak HTTP routes.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from streakmate.database import get_db
from streakmate.auth import verify_api_key, get_current_user_id
from streakmate.schemas import MissedStreakCreate, MissedStreakResponse
from streakmate.services.missed_streak_service import MissedStreakService
from streakmate.exceptions import (
    HabitNotFoundException, MissedStreakNotAllowedException, ValidationException
)

router = APIRouter(prefix="/api/streaks/missed", tags=["missed-streaks"], dependencies=[Depends(verify_api_key)])


@router.post("", response_model=MissedStreakResponse, status_code=201)
async def submit_missed_streak(
    entry: MissedStreakCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Explain why a habit was missed"""
    try:
        return MissedStreakService(db).submit(user_id, entry.habit_id, entry.explanation)
    except HabitNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (MissedStreakNotAllowedException, ValidationException) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=List[MissedStreakResponse])
async def get_missed_history(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return MissedStreakService(db).history(user_id)


@router.get("/{habit_id}", response_model=List[MissedStreakResponse])
async def get_missed_history_for_habit(
    habit_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return MissedStreakService(db).history(user_id, habit_id)
