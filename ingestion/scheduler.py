import logging
from datetime import datetime
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import settings
from core.exceptions import DuplicateJobError, LedgerError, SchedulerError
from ingestion.jobs import JobDefinition, resolve_job_date
from ingestion.ledger import ExecutionLedger
from ingestion.orchestrator import RetryOrchestrator

logger = logging.getLogger(__name__)


class TriggerRegistrar:
    """
    Binds job definitions to crontab schedules.

    One instance per process owns the APScheduler registry. Schema
    initialization must complete before the first trigger is registered.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        ledger: ExecutionLedger,
        orchestrator: RetryOrchestrator,
        timezone: Optional[str] = None
    ):
        self.engine = engine
        self.ledger = ledger
        self.orchestrator = orchestrator
        self.timezone = timezone or settings.TIMEZONE
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        self.schema_ready = False

    def make_callback(self, job: JobDefinition):
        """Zero-argument coroutine run by the scheduler on every fire."""

        async def fire():
            job_date = resolve_job_date(job.date_rule, datetime.now(ZoneInfo(self.timezone)))
            try:
                outcome = await self.orchestrator.execute(job, job_date)
            except DuplicateJobError:
                logger.info(f"Scheduler: {job.key} {job_date} already submitted, skipping")
                return
            except LedgerError as e:
                logger.error(f"Scheduler: {job.key} {job_date} aborted - {e}")
                return
            except Exception:
                logger.exception(f"Scheduler: {job.key} {job_date} crashed")
                return

            logger.info(
                f"Scheduler: {job.key} {job_date} ended {outcome['status']} "
                f"(job_id={outcome['job_id']})"
            )

        return fire

    def register(self, job: JobDefinition):
        """Add a crontab trigger for ``job``; requires an initialized schema."""
        if not self.schema_ready:
            raise SchedulerError(
                "Schema must be initialized before registering triggers",
                context={"job": job.key}
            )

        trigger = CronTrigger.from_crontab(job.schedule, timezone=self.timezone)
        scheduled = self.scheduler.add_job(
            self.make_callback(job),
            trigger=trigger,
            id=job.key,
            name=job.key,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(f"Registered {job.key} on '{job.schedule}' ({job.date_rule})")
        return scheduled

    async def start(self, jobs: Iterable[JobDefinition]):
        """Initialize the schema, register every job and start the scheduler."""
        await self.ledger.init_schema(self.engine)
        self.schema_ready = True

        for job in jobs:
            self.register(job)

        self.scheduler.start()
        logger.info("Scheduler started")

    def entries(self) -> List[dict]:
        """Registered triggers with their next fire time."""
        return [
            {"id": scheduled.id, "next_run_time": getattr(scheduled, "next_run_time", None)}
            for scheduled in self.scheduler.get_jobs()
        ]

    def show_entries(self) -> List[dict]:
        """Log every registered trigger; used once at startup."""
        entries = self.entries()
        for entry in entries:
            logger.info(f"Scheduled entry {entry['id']}: next run at {entry['next_run_time']}")
        return entries

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
