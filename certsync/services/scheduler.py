import logging
from typing import Callable, Optional

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger("certsync.scheduler")

SYNC_JOB_ID = "certsync_sync"


class SyncScheduler:
    """Runs the sync job on a crontab cadence (daily at midnight by default)."""

    def __init__(
        self,
        job: Callable[[], object],
        expression: str = "0 0 * * *",
        timezone: Optional[str] = None,
        scheduler: Optional[BaseScheduler] = None,
    ):
        self.job = job
        self.expression = expression
        self.timezone = timezone or None
        self.scheduler = scheduler or BlockingScheduler()

    def build_trigger(self) -> CronTrigger:
        """Parse the crontab expression."""
        try:
            return CronTrigger.from_crontab(self.expression, timezone=self.timezone)
        except ValueError as e:
            raise ValueError(f"Invalid schedule expression '{self.expression}': {e}") from e

    def run_job(self) -> None:
        """Invoke the job, keeping the schedule alive if it fails."""
        logger.info("Triggering certificate sync")
        try:
            self.job()
        except Exception as e:
            logger.error(f"Scheduled certificate sync failed: {e}", exc_info=True)

    def schedule(self) -> None:
        """Register the sync job with the underlying scheduler."""
        self.scheduler.add_job(
            self.run_job,
            trigger=self.build_trigger(),
            id=SYNC_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=3600,
        )
        logger.info(f"Added schedule job {SYNC_JOB_ID}: {self.expression}")

    def start(self) -> None:
        """Start the scheduler. Blocks when backed by a BlockingScheduler."""
        if not self.scheduler.running:
            logger.info("Scheduler service started.")
            self.scheduler.start()

    def stop(self) -> None:
        """Stop the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler service stopped.")
