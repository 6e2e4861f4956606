from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import asyncio
import logging
from pathlib import Path

from streakmate.database import engine, Base, SessionLocal
from streakmate import models  # Import all models to register them with Base
from streakmate.constants import (
    LOG_DIR, LOG_FILE, DEFAULT_LOG_DIRECTORY_DEV,
    CORS_ALLOWED_ORIGINS, SCHEDULER_ENABLED
)
from streakmate.routes import habits, restore, missed, notifications, sweep, ws
from streakmate.services.event_service import EventBus
from streakmate.services.scheduler_service import HabitScheduler

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    Path(DEFAULT_LOG_DIRECTORY_DEV).mkdir(parents=True, exist_ok=True)
    log_path = Path(DEFAULT_LOG_DIRECTORY_DEV) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("streakmate")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="StreakMate API",
    description="Habit tracker with streaks, missed detection and monthly restores",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

event_bus = EventBus()
event_bus.subscribe(lambda event_type, payload: logger.info(f"Event {event_type}: {payload}"))
event_bus.subscribe(ws.manager.publish)

scheduler = HabitScheduler(SessionLocal, event_bus)

app.state.event_bus = event_bus
app.state.scheduler = scheduler

app.include_router(habits.router)
app.include_router(restore.router)
app.include_router(missed.router)
app.include_router(notifications.router)
app.include_router(sweep.router)
app.include_router(ws.router)


@app.on_event("startup")
async def startup_event():
    logger.info(f"StreakMate API started. Logging to: {log_path}")
    ws.manager.bind_loop(asyncio.get_running_loop())
    if SCHEDULER_ENABLED:
        scheduler.start()
    else:
        logger.info("Habit scheduler disabled by configuration")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down StreakMate API")
    scheduler.stop()


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "StreakMate API", "status": "active"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("streakmate.main:app", host="0.0.0.0", port=8000, reload=False)
