"""
Habit HTTP routes.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from streakmate.database import get_db
from streakmate.auth import verify_api_key, get_current_user_id
from streakmate.routes import get_event_bus
from streakmate.schemas import (
    HabitCreate, HabitUpdate, HabitResponse, HabitStatsResponse, CompletionUpdate
)
from streakmate.services.event_service import EventBus
from streakmate.services.habit_service import HabitService
from streakmate.exceptions import (
    HabitNotFoundException, HabitMissedException,
    InvalidDateFormatException, InvalidTimeFormatException, ValidationException
)

router = APIRouter(prefix="/api/habits", tags=["habits"], dependencies=[Depends(verify_api_key)])


@router.get("", response_model=List[HabitResponse])
async def get_habits(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Get all habits with up-to-date streak and status"""
    try:
        return HabitService(db, events).list_habits(user_id)
    except (InvalidDateFormatException, InvalidTimeFormatException, ValidationException) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("", response_model=HabitResponse, status_code=201)
async def create_habit(
    habit: HabitCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Create a new habit"""
    try:
        return HabitService(db, events).create_habit(user_id, habit)
    except (InvalidTimeFormatException, ValidationException) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/stats", response_model=HabitStatsResponse)
async def get_habit_stats(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Completed today, best current streak and longest streak"""
    try:
        return HabitService(db, events).get_stats(user_id)
    except (InvalidDateFormatException, InvalidTimeFormatException, ValidationException) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{habit_id}", response_model=HabitResponse)
async def get_habit(
    habit_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        return HabitService(db).get_habit(user_id, habit_id)
    except HabitNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{habit_id}", response_model=HabitResponse)
async def update_habit(
    habit_id: int,
    habit_update: HabitUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Update habit settings"""
    try:
        return HabitService(db, events).update_habit(user_id, habit_id, habit_update)
    except HabitNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidDateFormatException, InvalidTimeFormatException, ValidationException) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{habit_id}/complete", response_model=HabitResponse)
async def set_habit_completion(
    habit_id: int,
    completion: CompletionUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Mark or unmark a day as completed"""
    try:
        return HabitService(db, events).set_completion(
            user_id, habit_id, completion.date, completion.completed
        )
    except HabitNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except HabitMissedException as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (InvalidDateFormatException, InvalidTimeFormatException, ValidationException) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{habit_id}")
async def delete_habit(
    habit_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Delete a habit and its related records"""
    try:
        failed_tables = HabitService(db, events).delete_habit(user_id, habit_id)
    except HabitNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"message": "Habit deleted", "cleanup_failed": failed_tables}
