"""
HTTP and WebSocket routes.
"""
from fastapi import Request

from streakmate.services.event_service import EventBus
from streakmate.services.scheduler_service import HabitScheduler


def get_event_bus(request: Request) -> EventBus:
    """Event bus created at app startup"""
    return request.app.state.event_bus


def get_habit_scheduler(request: Request) -> HabitScheduler:
    """Scheduler created at app startup"""
    return request.app.state.scheduler
