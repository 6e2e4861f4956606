"""
Manual sweep trigger.
"""
from fastapi import APIRouter, Depends, HTTPException

from streakmate.auth import verify_api_key
from streakmate.routes import get_habit_scheduler
from streakmate.schemas import SweepResponse
from streakmate.services.scheduler_service import HabitScheduler

router = APIRouter(prefix="/api/sweep", tags=["sweep"], dependencies=[Depends(verify_api_key)])


@router.post("", response_model=SweepResponse)
def run_sweep(scheduler: HabitScheduler = Depends(get_habit_scheduler)):
    """Run a full status sweep and missed purge now"""
    result = scheduler.run_once()
    if result is None:
        raise HTTPException(status_code=409, detail="A sweep is already running")
    return result.to_dict()
