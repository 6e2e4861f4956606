"""
Missed-habit sweep service.
Handles:
- Re-evaluating pending/completed habits and persisting status transitions
- Hard-deleting habits left missed for longer than the retention window
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from streakmate.models import Habit
from streakmate.repositories.habit_repository import HabitRepository
from streakmate.services.cleanup_service import CleanupService
from streakmate.services.date_service import DateService
from streakmate.services.event_service import EventBus
from streakmate.services.notification_service import NotificationService
from streakmate.services.status_service import HabitSnapshot, StatusService
from streakmate.services.streak_service import StreakService
from streakmate.constants import (
    STATUS_MISSED, MISSED_RETENTION_HOURS,
    EVENT_STATUS_CHANGED, EVENT_HABIT_DELETED
)

logger = logging.getLogger("streakmate.sweeper")


@dataclass
class SweepResult:
    """Summary of one sweep pass"""
    updated: List[int] = field(default_factory=list)
    deleted: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "updated": list(self.updated),
            "deleted": list(self.deleted),
            "failed": list(self.failed),
        }


class SweepService:
    """Service for periodic status sweeps and missed-habit purges"""

    def __init__(self, db: Session, events: Optional[EventBus] = None):
        self.db = db
        self.events = events
        self.habit_repo = HabitRepository()
        self.cleanup = CleanupService(db)
        self.notifications = NotificationService(db)

    def sweep_once(self, now: Optional[datetime] = None) -> SweepResult:
        """
        Run a full sweep: status re-evaluation, then purge of expired missed habits.

        Args:
            now: Reference moment (defaults to current local time)

        Returns:
            SweepResult with updated, deleted and failed habit IDs
        """
        now = now or DateService.now()
        result = SweepResult()
        self.sweep_statuses(now, result)
        self.purge_expired_missed(now, result)
        logger.info(
            f"Sweep finished: {len(result.updated)} updated, "
            f"{len(result.deleted)} deleted, {len(result.failed)} failed"
        )
        return result

    def sweep_statuses(
        self,
        now: Optional[datetime] = None,
        result: Optional[SweepResult] = None
    ) -> SweepResult:
        """
        Re-evaluate every pending or completed habit and persist status changes.

        Each write is conditioned on the status read at the start of the pass,
        so a completion that lands meanwhile is never overwritten. A failure
        on one habit is logged and the pass continues.
        """
        now = now or DateService.now()
        result = result if result is not None else SweepResult()

        # Snapshot before any commit expires the loaded rows
        work = []
        for habit in self.habit_repo.get_sweep_candidates(self.db):
            habit_id = habit.id
            try:
                work.append((habit_id, habit, HabitSnapshot.from_model(habit)))
            except Exception as e:
                result.failed.append(habit_id)
                logger.error(f"Cannot read habit {habit_id} for sweep: {e}")

        for habit_id, habit, snapshot in work:
            try:
                if self._reevaluate(habit, snapshot, now):
                    result.updated.append(habit_id)
            except Exception as e:
                self.db.rollback()
                result.failed.append(habit_id)
                logger.error(f"Status sweep failed for habit {habit_id}: {e}")

        return result

    def _reevaluate(self, habit: Habit, snapshot: HabitSnapshot, now: datetime) -> bool:
        """Recompute one habit; returns True if its status transition was persisted"""
        new_status = StatusService.resolve_status(snapshot, now)
        new_streak = StreakService.compute_streak(
            snapshot.completed_dates, snapshot.frequency, snapshot.target, now
        )

        if new_status == snapshot.status:
            if new_streak != snapshot.streak:
                self.habit_repo.update_status_if(
                    self.db, snapshot.id, snapshot.status, {Habit.streak: new_streak}
                )
            return False

        written = self.habit_repo.update_status_if(
            self.db,
            snapshot.id,
            snapshot.status,
            {
                Habit.status: new_status,
                Habit.streak: new_streak,
                Habit.status_updated_at: now,
            }
        )
        if not written:
            logger.info(f"Habit {snapshot.id} changed during sweep, skipping")
            return False

        logger.info(f"Habit {snapshot.id}: {snapshot.status} -> {new_status}")

        if new_status == STATUS_MISSED:
            try:
                self.notifications.notify_missed(habit, now)
            except Exception as e:
                self.db.rollback()
                logger.error(f"Missed notification for habit {snapshot.id} failed: {e}")

        self._publish(EVENT_STATUS_CHANGED, {
            "habit_id": snapshot.id,
            "user_id": snapshot.user_id,
            "old_status": snapshot.status,
            "new_status": new_status,
        })
        return True

    def purge_expired_missed(
        self,
        now: Optional[datetime] = None,
        result: Optional[SweepResult] = None
    ) -> SweepResult:
        """
        Hard-delete habits that stayed missed for more than MISSED_RETENTION_HOURS.

        The habit deletion is authoritative. Dependent records are cleaned
        up best-effort afterwards and their failures never undo it.
        """
        now = now or DateService.now()
        result = result if result is not None else SweepResult()
        cutoff = now - timedelta(hours=MISSED_RETENTION_HOURS)

        expired = [
            (habit.id, habit.user_id, habit.name)
            for habit in self.habit_repo.get_expired_missed(self.db, cutoff)
        ]
        if not expired:
            logger.info("No overdue missed habits found")
            return result

        logger.info(f"Found {len(expired)} habits missed for more than {MISSED_RETENTION_HOURS}h")

        for habit_id, user_id, name in expired:
            try:
                if not self.habit_repo.delete_if_expired(self.db, habit_id, cutoff):
                    logger.info(f"Habit {habit_id} was restored or removed meanwhile, skipping")
                    continue
            except Exception as e:
                self.db.rollback()
                result.failed.append(habit_id)
                logger.error(f"Deleting missed habit {habit_id} failed: {e}")
                continue

            result.deleted.append(habit_id)
            logger.info(f"Permanently deleted habit {habit_id} ({name})")

            failed_tables = self.cleanup.delete_dependents(habit_id)
            if failed_tables:
                logger.error(f"Habit {habit_id} deleted with leftover records in: {', '.join(failed_tables)}")

            try:
                self.notifications.notify_deleted(user_id, name, now)
            except Exception as e:
                self.db.rollback()
                logger.error(f"Deletion notification for habit {habit_id} failed: {e}")

            self._publish(EVENT_HABIT_DELETED, {"habit_id": habit_id, "user_id": user_id})

        return result

    def _publish(self, event_type: str, payload: dict) -> None:
        if self.events is not None:
            self.events.publish(event_type, payload)
