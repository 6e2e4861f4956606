"""
Application constants and environment-driven configuration.
"""
import os
from datetime import timedelta

# Frequencies
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY)

# Habit statuses
STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_MISSED = "missed"

# Boundary formats
DATE_FORMAT = "%Y-%m-%d"

# Habit defaults
DEFAULT_EMOJI = "🎯"
DEFAULT_ICON = "Flame"
HABIT_NAME_MAX_LENGTH = 100

# Restore / missed rules
RESTORE_CHANCES_PER_MONTH = 5
RESTORE_GRACE_PERIOD = timedelta(hours=24)
MISSED_RETENTION_HOURS = 24

# Event types published on the event bus
EVENT_STATUS_CHANGED = "habit_status_changed"
EVENT_HABIT_DELETED = "habit_deleted"

# Database
DATABASE_URL = os.getenv("STREAKMATE_DATABASE_URL", "sqlite:///./streakmate.db")

# Auth
API_KEY = os.getenv("STREAKMATE_API_KEY", "your-secret-key-change-me")

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/streakmate"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
LOG_DIR = os.getenv("STREAKMATE_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("STREAKMATE_LOG_FILE", "app.log")

# CORS settings for the web client
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "STREAKMATE_CORS_ORIGINS",
        "https://streakmate.vercel.app,http://localhost:5173,http://localhost:5175"
    ).split(",")
    if origin.strip()
]

# Scheduler
SCHEDULER_ENABLED = os.getenv("STREAKMATE_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")
STATUS_SWEEP_INTERVAL_SECONDS = int(os.getenv("STREAKMATE_SWEEP_INTERVAL_SECONDS", "60"))
MISSED_PURGE_CRONTAB = os.getenv("STREAKMATE_PURGE_CRONTAB", "0 * * * *")
