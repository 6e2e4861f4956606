"""
Streak restore HTTP routes.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from streakmate.database import get_db
from streakmate.auth import verify_api_key, get_current_user_id
from streakmate.routes import get_event_bus
from streakmate.schemas import RestoreRequest, RestoreChancesResponse, RestoreResponse
from streakmate.services.event_service import EventBus
from streakmate.services.restore_service import RestoreService
from streakmate.exceptions import (
    HabitNotFoundException, HabitNotMissedException,
    HabitAlreadyCompletedException, RestoreQuotaExceededException
)

router = APIRouter(prefix="/api/streak-restore", tags=["streak-restore"], dependencies=[Depends(verify_api_key)])


@router.get("/chances", response_model=RestoreChancesResponse)
async def get_restore_chances(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Restore chances left this month"""
    return RestoreService(db).get_chances(user_id)


@router.post("/restore", response_model=RestoreResponse)
async def restore_streak(
    request: RestoreRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    events: EventBus = Depends(get_event_bus)
):
    """Restore a missed habit, spending one monthly chance"""
    try:
        return RestoreService(db, events).restore(user_id, request.habit_id)
    except HabitNotFoundException as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RestoreQuotaExceededException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (HabitNotMissedException, HabitAlreadyCompletedException) as e:
        raise HTTPException(status_code=409, detail=str(e))
