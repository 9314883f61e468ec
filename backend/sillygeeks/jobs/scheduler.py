"""
Ingestion Scheduler - runs the ingestion pipeline on a fixed interval.

Runs once as soon as the scheduler starts, then every
``interval_minutes``. APScheduler's ``max_instances=1`` plus the pipeline's
own in-progress flag keep at most one run active; a tick that would overlap
is skipped, not queued.
"""
import asyncio
from datetime import datetime, timezone
from typing import Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sillygeeks.jobs.ingestion import IngestionPipeline
from sillygeeks.models.domain import IngestionStats

logger = structlog.get_logger(__name__)

JOB_ID = "news_ingestion"


class IngestionScheduler:
    """Schedules recurring ingestion runs."""

    def __init__(
        self,
        pipeline: IngestionPipeline,
        interval_minutes: int = 60,
        run_on_start: bool = True,
    ):
        self.pipeline = pipeline
        self.interval_minutes = interval_minutes
        self.run_on_start = run_on_start

        self._scheduler: Optional[AsyncIOScheduler] = None
        self._manual_tasks: set[asyncio.Task] = set()

    async def run_job(self) -> Optional[IngestionStats]:
        """Job body: one pipeline run, with errors logged instead of raised."""
        try:
            stats = await self.pipeline.run()
        except Exception as e:
            logger.error("Scheduled ingestion failed", error=str(e))
            return None

        if not stats.skipped_run:
            logger.info("Scheduled ingestion completed", stats=stats.to_dict())
        return stats

    def start(self) -> None:
        """Start the scheduler loop (requires a running event loop)."""
        if self._scheduler is not None and self._scheduler.running:
            logger.warning("Scheduler already running")
            return

        # An explicit next_run_time=None would add the job paused.
        job_kwargs = {}
        if self.run_on_start:
            job_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            self.run_job,
            IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            name="News ingestion",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **job_kwargs,
        )
        self._scheduler.start()
        logger.info(
            "Ingestion scheduler started",
            interval_minutes=self.interval_minutes,
            run_on_start=self.run_on_start,
        )

    def shutdown(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        for task in list(self._manual_tasks):
            task.cancel()
        logger.info("Ingestion scheduler stopped")

    def trigger_now(self) -> bool:
        """
        Start an out-of-band run in the background.

        Returns False (and starts nothing) if a run is already in progress.
        """
        if self.pipeline.is_running:
            logger.info("Manual ingestion requested while a run is active, ignoring")
            return False

        task = asyncio.create_task(self.run_job())
        self._manual_tasks.add(task)
        task.add_done_callback(self._manual_tasks.discard)
        return True

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def get_status(self) -> dict:
        """Scheduler and last-run status for the status endpoint."""
        next_run = None
        if self._scheduler is not None:
            job = self._scheduler.get_job(JOB_ID)
            if job is not None and job.next_run_time is not None:
                next_run = job.next_run_time.isoformat()

        last = self.pipeline.last_stats
        return {
            "scheduler_running": self.is_running,
            "ingestion_in_progress": self.pipeline.is_running,
            "interval_minutes": self.interval_minutes,
            "next_run": next_run,
            "last_run": last.to_dict() if last else None,
        }
