"""
Background scheduler for habit maintenance
Handles:
- Status sweep on an interval (and once right after start)
- Hourly purge of habits left missed for more than a day
"""

import logging
from datetime import datetime
from threading import Lock
from typing import Callable, Optional, Tuple
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from streakmate.services.event_service import EventBus
from streakmate.services.sweep_service import SweepService, SweepResult
from streakmate.constants import STATUS_SWEEP_INTERVAL_SECONDS, MISSED_PURGE_CRONTAB

logger = logging.getLogger("streakmate.scheduler")

STATUS_SWEEP_JOB_ID = "status_sweep"
MISSED_PURGE_JOB_ID = "missed_purge"


class HabitScheduler:
    """Owns the background scheduler; one instance per process"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        events: Optional[EventBus] = None,
        sweep_interval_seconds: int = STATUS_SWEEP_INTERVAL_SECONDS,
        purge_crontab: str = MISSED_PURGE_CRONTAB
    ):
        self.session_factory = session_factory
        self.events = events
        self.sweep_interval_seconds = sweep_interval_seconds
        self.purge_crontab = purge_crontab
        self.scheduler = BackgroundScheduler()
        # One lock per job; a full sweep holds both
        self._sweep_lock = Lock()
        self._purge_lock = Lock()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        """Register jobs and start the scheduler"""
        if self.scheduler.running:
            return

        self.scheduler.add_job(
            self.run_status_sweep,
            IntervalTrigger(seconds=self.sweep_interval_seconds),
            id=STATUS_SWEEP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now()
        )

        self.scheduler.add_job(
            self.run_missed_purge,
            CronTrigger.from_crontab(self.purge_crontab),
            id=MISSED_PURGE_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )

        self.scheduler.start()
        logger.info(">>> Habit scheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in self.scheduler.get_jobs()]}")

    def stop(self) -> None:
        """Stop the scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Habit scheduler stopped")

    def run_status_sweep(self, now: Optional[datetime] = None) -> Optional[SweepResult]:
        """Job: re-evaluate habit statuses"""
        return self._run(
            "status sweep",
            lambda service: service.sweep_statuses(now),
            (self._sweep_lock,)
        )

    def run_missed_purge(self, now: Optional[datetime] = None) -> Optional[SweepResult]:
        """Job: delete habits left missed past the retention window"""
        return self._run(
            "missed purge",
            lambda service: service.purge_expired_missed(now),
            (self._purge_lock,)
        )

    def run_once(self, now: Optional[datetime] = None) -> Optional[SweepResult]:
        """
        Full sweep on demand.

        Returns:
            SweepResult, or None if a status sweep or purge is running
        """
        return self._run(
            "full sweep",
            lambda service: service.sweep_once(now),
            (self._sweep_lock, self._purge_lock),
            reraise=True
        )

    def _run(
        self,
        name: str,
        action: Callable[[SweepService], SweepResult],
        locks: Tuple[Lock, ...],
        reraise: bool = False
    ) -> Optional[SweepResult]:
        held = []
        for lock in locks:
            if not lock.acquire(blocking=False):
                for acquired in reversed(held):
                    acquired.release()
                logger.warning(f"Skipping {name}: previous run still in progress")
                return None
            held.append(lock)

        db = None
        try:
            db = self.session_factory()
            return action(SweepService(db, self.events))
        except Exception as e:
            logger.error(f"Scheduler Error ({name}): {e}")
            if reraise:
                raise
            return None
        finally:
            if db is not None:
                db.close()
            for lock in reversed(held):
                lock.release()
