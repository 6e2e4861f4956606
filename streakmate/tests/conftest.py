"""
Shared fixtures: in-memory database, fixed clock, habit factory.
"""
import os
import tempfile

# Configuration is read at import time, so it must be set before streakmate is imported
os.environ["STREAKMATE_DATABASE_URL"] = "sqlite://"
os.environ["STREAKMATE_LOG_DIR"] = tempfile.mkdtemp(prefix="streakmate-logs-")
os.environ["STREAKMATE_SCHEDULER_ENABLED"] = "false"
os.environ["STREAKMATE_API_KEY"] = "test-api-key"

import pytest
from datetime import date, datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from streakmate.database import Base
from streakmate.models import Habit

TEST_API_KEY = "test-api-key"


def days_ago(today: date, *offsets: int) -> list:
    """YYYY-MM-DD strings for today minus each offset"""
    return [(today - timedelta(days=offset)).isoformat() for offset in offsets]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def now():
    """Wednesday 2024-01-10, 10:00 local time"""
    return datetime(2024, 1, 10, 10, 0, 0)


@pytest.fixture
def today(now):
    return now.date()


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def make_habit(db_session, now):
    """Factory for persisted habits; created a month before `now` unless overridden"""
    def _make(**overrides):
        completed_dates = overrides.pop("completed_dates", [])
        values = {
            "user_id": 1,
            "name": "Read",
            "frequency": "daily",
            "target": 1,
            "time": "",
            "time_from": "",
            "time_to": "",
            "status": "pending",
            "streak": 0,
            "created_at": now - timedelta(days=30),
            "status_updated_at": now - timedelta(days=1),
        }
        values.update(overrides)
        habit = Habit(**values)
        habit.completed_dates = completed_dates
        db_session.add(habit)
        db_session.commit()
        db_session.refresh(habit)
        return habit

    return _make
