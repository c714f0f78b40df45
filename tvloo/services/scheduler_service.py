"""
Cache warm-up schedule

An optional cron job that reloads both sources ahead of user requests, so
catalog calls usually find warm caches.
"""
import logging
from datetime import datetime
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from tvloo.services.sources import DataSources


logger = logging.getLogger(__name__)


class CacheRefreshScheduler:
    """Runs DataSources.load() on a cron schedule; inert without an expression"""

    job_id = 'cache_refresh'

    def __init__(self, sources: DataSources, cron_expression: str | None):
        self.sources = sources
        self.cron_expression = cron_expression
        self.scheduler: AsyncIOScheduler | None = None

    async def warm_caches(self) -> None:
        channels, guide = await self.sources.load()
        logger.info(
            "Scheduled refresh done: %s channels, %s guide channels",
            len(channels), len(guide or {})
        )

    def start(self) -> None:
        if not self.cron_expression:
            logger.info("Cache refresh schedule disabled")
            return

        self.scheduler = AsyncIOScheduler(timezone='UTC')
        self.scheduler.add_job(
            self.warm_caches,
            CronTrigger.from_crontab(self.cron_expression),
            id=self.job_id,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info("Cache refresh scheduled at '%s', next run %s",
                    self.cron_expression, self.get_next_run_time())

    def shutdown(self) -> None:
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        self.scheduler = None

    def get_next_run_time(self) -> datetime | None:
        job = self.scheduler.get_job(self.job_id) if self.scheduler else None
        return job.next_run_time if job else None
