import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from ingestion.runner import ContactIngestionRunner

logger = logging.getLogger(__name__)


class ContactRefreshScheduler:
    def __init__(self, runner: ContactIngestionRunner, interval_seconds: Optional[int] = None):
        self.runner = runner
        self.interval_seconds = interval_seconds or settings.REFRESH_INTERVAL
        self.scheduler = AsyncIOScheduler()

    async def refresh_job(self):
        """Silent refresh; only re-acquires once the memory snapshot lapses"""
        logger.debug("Scheduler: refreshing contacts")
        contacts = await self.runner.get_contacts()
        logger.debug(
            f"Scheduler: {len(contacts)} contacts, "
            f"status={self.runner.connection_status.value}"
        )

    def start(self):
        """Start the scheduler (no-op in local mode)"""
        if self.runner.use_local_csv:
            logger.info("Local CSV mode, auto-refresh disabled")
            return

        self.scheduler.add_job(
            self.refresh_job,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id="contact_refresh",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        logger.info(f"Contact refresh scheduler started (every {self.interval_seconds}s)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Contact refresh scheduler stopped")
