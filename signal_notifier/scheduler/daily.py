"""
Daily trigger for signal runs.

Wraps an APScheduler background scheduler with a cron trigger at a fixed
local wall-clock time. Nothing is scheduled until the hosting process calls
start().
"""

from datetime import datetime
from typing import Optional

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..errors import SchedulerError, SystemFailureError
from ..models.notifications import RunSummary
from .runner import SignalRunner

logger = structlog.get_logger(__name__)


class DailyScheduler:
    """Triggers one SignalRunner run per calendar day."""

    JOB_ID = "daily-signal-run"

    def __init__(
        self,
        runner: SignalRunner,
        hour: int = 5,
        minute: int = 0,
        timezone: str = "Asia/Seoul",
        misfire_grace_seconds: int = 3600,
        scheduler: Optional[BackgroundScheduler] = None
    ):
        self.runner = runner
        self.hour = hour
        self.minute = minute
        self.timezone = timezone
        self.misfire_grace_seconds = misfire_grace_seconds
        self.logger = logger

        self._scheduler = scheduler or BackgroundScheduler(daemon=True, timezone=timezone)
        self._last_summary: Optional[RunSummary] = None

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    @property
    def last_summary(self) -> Optional[RunSummary]:
        return self._last_summary

    @property
    def next_run_time(self) -> Optional[datetime]:
        job = self._scheduler.get_job(self.JOB_ID)
        return job.next_run_time if job else None

    def start(self) -> None:
        """Register the daily job and start the background timer."""
        if self.running:
            self.logger.warning("Scheduler already running")
            return

        try:
            self._scheduler.add_job(
                self._run_job,
                CronTrigger(hour=self.hour, minute=self.minute, timezone=self.timezone),
                id=self.JOB_ID,
                replace_existing=True,
                max_instances=1,
                coalesce=True,
                misfire_grace_time=self.misfire_grace_seconds,
            )
            self._scheduler.start()
        except Exception as e:
            raise SchedulerError(f"Failed to start scheduler: {e}", job_id=self.JOB_ID) from e

        self.logger.info(
            "Scheduler started",
            delivery_time=f"{self.hour:02d}:{self.minute:02d}",
            timezone=self.timezone,
            next_run_time=str(self.next_run_time)
        )

    def stop(self, wait: bool = True, cancel_in_flight: bool = False) -> None:
        """
        Stop the timer.

        Args:
            wait: Block until an in-flight run has settled
            cancel_in_flight: Record remaining units of an in-flight run as
                Failed instead of letting them finish
        """
        if cancel_in_flight:
            self.runner.cancel()

        if not self.running:
            return

        self._scheduler.shutdown(wait=wait)
        self.logger.info("Scheduler stopped", waited=wait)

    def trigger_now(self) -> Optional[RunSummary]:
        """Run immediately on the calling thread, outside the daily timer."""
        return self._run_job()

    def _run_job(self) -> Optional[RunSummary]:
        try:
            summary = self.runner.run_once()
        except SystemFailureError as e:
            self.logger.error(
                "Signal run aborted by system failure",
                error=str(e),
                error_type=type(e).__name__
            )
            summary = e.context.get("summary")

        if summary is not None:
            self._last_summary = summary
        return summary
