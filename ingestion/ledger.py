"""
Execution ledger backed by the ``cron_jobs`` table.

Every triggered job gets exactly one row. The retry orchestrator is the only
writer; operational tooling reads it through ``list_recent`` and
``list_unfinished``. Rows in a terminal status (finished, failed) are never
modified again: every UPDATE is guarded on the current status.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
import logging

from core.exceptions import DuplicateJobError, LedgerCreateError, LedgerUpdateError
from models.base import Base, JobStatus, TERMINAL_STATUSES
from models.cron_job import CronJob
# Imported for their table definitions
from models.funeral_invoice import FuneralInvoice  # noqa: F401
from models.reservation_summary import GolfReservationSummary  # noqa: F401
from schemas.params import params_hash, serialize_params

logger = logging.getLogger(__name__)


class ExecutionLedger:
    """Durable audit trail of job executions."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @staticmethod
    async def init_schema(engine: AsyncEngine) -> None:
        """Create ledger and fact tables plus their indexes if absent."""
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        logger.info("Database schema initialized")

    async def create(
        self,
        job_name: str,
        job_date: date,
        params: BaseModel,
        max_retries: int
    ) -> int:
        """
        Insert a pending row and return its job_id.

        Raises:
            DuplicateJobError: A row with the same name, date and params exists
            LedgerCreateError: Any other database failure
        """
        serialized = serialize_params(params)
        job = CronJob(
            job_name=job_name,
            job_date=job_date,
            job_params=serialized,
            job_params_hash=params_hash(serialized),
            job_status=JobStatus.PENDING,
            execution_time_ms=0,
            retry_count=0,
            max_retries=max_retries,
        )
        context = {"job_name": job_name, "job_date": job_date.isoformat()}

        try:
            async with self.session_maker() as session:
                session.add(job)
                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    raise DuplicateJobError(
                        "Job already submitted for this date and parameters",
                        context=context,
                        original_exception=e
                    )
        except (SQLAlchemyError, OSError) as e:
            raise LedgerCreateError(
                "Failed to create execution ledger row",
                context=context,
                original_exception=e
            )

        logger.info(f"Created ledger row job_id={job.job_id} for {job_name} {job_date}")
        return job.job_id

    async def update(
        self,
        job_id: int,
        status: JobStatus,
        message: Optional[str] = None,
        execution_time_ms: Optional[int] = None,
        retry_count: Optional[int] = None
    ) -> bool:
        """
        Persist a status transition as a single autocommit UPDATE.

        Returns False when the row is missing or already terminal.

        Raises:
            LedgerUpdateError: If the statement fails
        """
        now = datetime.utcnow()
        values = {"job_status": status, "updated_at": now}
        if message is not None:
            values["message"] = message
        if execution_time_ms is not None:
            values["execution_time_ms"] = execution_time_ms
        if retry_count is not None:
            values["retry_count"] = retry_count
        if status in TERMINAL_STATUSES:
            values["finished_at"] = now

        stmt = (
            update(CronJob)
            .where(
                CronJob.job_id == job_id,
                CronJob.job_status.notin_(list(TERMINAL_STATUSES)),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            async with self.session_maker() as session:
                result = await session.execute(stmt)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise LedgerUpdateError(
                "Failed to update execution ledger row",
                context={"job_id": job_id, "job_status": status.value},
                original_exception=e
            )

        if result.rowcount == 0:
            logger.warning(f"Ledger row job_id={job_id} missing or terminal; {status.value} not applied")
            return False
        return True

    async def get(self, job_id: int) -> Optional[CronJob]:
        async with self.session_maker() as session:
            return await session.get(CronJob, job_id)

    async def list_recent(self, limit: int = 20) -> List[CronJob]:
        """Most recent executions, newest first."""
        async with self.session_maker() as session:
            result = await session.execute(
                select(CronJob)
                .order_by(CronJob.created_at.desc(), CronJob.job_id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def list_unfinished(
        self,
        job_name: Optional[str] = None,
        job_date: Optional[date] = None
    ) -> List[CronJob]:
        """
        Rows that have not reached ``finished``.

        Failed rows are included so operators can decide on a manual re-run.
        Nothing here is resumed automatically.
        """
        stmt = select(CronJob).where(CronJob.job_status != JobStatus.FINISHED)
        if job_name is not None:
            stmt = stmt.where(CronJob.job_name == job_name)
        if job_date is not None:
            stmt = stmt.where(CronJob.job_date == job_date)
        stmt = stmt.order_by(CronJob.job_id.asc())

        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
