# ============================================================================
# File: ingestion/orchestrator.py
# Description: Drives one logical job through bounded, tracked retries
# ============================================================================
"""
Retry Orchestrator - turns a trigger into a tracked, retried, idempotent job.

For one execution:
- Creates the ledger row (pending); failure here aborts before any fetch
- Fetches with exponential backoff between failed attempts
- Stores the fetched records once; storage failures are never retried
- Leaves the ledger row in exactly one terminal status
"""

import asyncio
import time
from datetime import date
from typing import Any, Awaitable, Callable, Dict, Optional
import logging

from core.config import settings
from core.exceptions import LedgerUpdateError
from core.logging import JobLogAdapter
from ingestion.backoff import compute_backoff
from ingestion.jobs import JobDefinition
from ingestion.ledger import ExecutionLedger
from models.base import JobStatus

logger = logging.getLogger(__name__)


class RetryOrchestrator:
    """
    Runs fetch-then-store for a job definition and records every transition.

    Responsibilities:
    - Own the ledger row for the lifetime of the execution
    - Retry fetch failures up to ``max_retries`` times with backoff
    - Accumulate fetch and store wall time into ``execution_time_ms``
    - Treat ledger update failures as lost observability, not lost work
    """

    def __init__(
        self,
        ledger: ExecutionLedger,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.perf_counter,
        backoff_base_seconds: Optional[float] = None
    ):
        self.ledger = ledger
        self.sleep = sleep
        self.clock = clock
        self.backoff_base_seconds = backoff_base_seconds

    async def execute(
        self,
        job: JobDefinition,
        job_date: date,
        max_retries: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Execute one logical job for a business date.

        Args:
            job: Job definition (source, writer, params builder)
            job_date: Business date the execution targets
            max_retries: Retry ceiling; defaults to settings.MAX_RETRIES

        Returns:
            Outcome dictionary:
            - job_id, job_name, job_date
            - status: "finished" or "failed"
            - records_fetched, records_inserted
            - retry_count, execution_time_ms, message

        Raises:
            LedgerError: If the ledger row cannot be created (no fetch attempted)
        """
        if max_retries is None:
            max_retries = settings.MAX_RETRIES

        params = job.build_params(job_date)
        job_id = await self.ledger.create(job.name, job_date, params, max_retries)
        log = JobLogAdapter(logger, job_id, job.key, job_date)

        outcome: Dict[str, Any] = {
            "job_id": job_id,
            "job_name": job.name,
            "job_date": job_date.isoformat(),
            "status": JobStatus.RUNNING.value,
            "records_fetched": 0,
            "records_inserted": 0,
            "retry_count": 0,
            "execution_time_ms": 0,
            "message": None,
        }

        retry_count = 0
        execution_time_ms = 0

        while True:
            # --------------------------------------------------
            # ATTEMPT START
            # --------------------------------------------------
            status = JobStatus.RUNNING if retry_count == 0 else JobStatus.RETRYING
            await self._record(log, job_id, status, retry_count=retry_count)

            log.info(f"attempt {retry_count + 1} of {max_retries + 1}")

            # --------------------------------------------------
            # FETCH
            # --------------------------------------------------
            started = self.clock()
            try:
                records = await job.source.fetch(params)
            except Exception as e:
                execution_time_ms += self._elapsed_ms(started)
                attempt = retry_count
                retry_count += 1

                if retry_count > max_retries:
                    message = f"Fetch failed after {retry_count} attempts: {e}"
                    log.error(message)
                    await self._record(
                        log,
                        job_id,
                        JobStatus.FAILED,
                        message=message,
                        execution_time_ms=execution_time_ms,
                        retry_count=attempt
                    )
                    outcome.update(
                        status=JobStatus.FAILED.value,
                        retry_count=attempt,
                        execution_time_ms=execution_time_ms,
                        message=message,
                    )
                    return outcome

                delay = compute_backoff(retry_count, self.backoff_base_seconds)
                message = f"Fetch attempt {retry_count} failed: {e}"
                log.warning(f"{message}; retrying in {delay:.0f}s")
                await self._record(
                    log,
                    job_id,
                    JobStatus.RETRYING,
                    message=message,
                    execution_time_ms=execution_time_ms,
                    retry_count=attempt
                )
                await self.sleep(delay)
                continue

            execution_time_ms += self._elapsed_ms(started)
            records = list(records)
            outcome["records_fetched"] = len(records)

            # --------------------------------------------------
            # STORE (never retried)
            # --------------------------------------------------
            started = self.clock()
            try:
                inserted = await job.writer.store(records)
            except Exception as e:
                execution_time_ms += self._elapsed_ms(started)
                message = f"Fetched {len(records)} records but failed to store: {e}"
                log.error(message)
                await self._record(
                    log,
                    job_id,
                    JobStatus.FAILED,
                    message=message,
                    execution_time_ms=execution_time_ms,
                    retry_count=retry_count
                )
                outcome.update(
                    status=JobStatus.FAILED.value,
                    retry_count=retry_count,
                    execution_time_ms=execution_time_ms,
                    message=message,
                )
                return outcome

            execution_time_ms += self._elapsed_ms(started)
            message = (
                f"Fetched {len(records)} records, inserted {inserted}, "
                f"skipped {len(records) - inserted} duplicates"
            )
            log.info(message)
            await self._record(
                log,
                job_id,
                JobStatus.FINISHED,
                message=message,
                execution_time_ms=execution_time_ms,
                retry_count=retry_count
            )
            outcome.update(
                status=JobStatus.FINISHED.value,
                records_inserted=inserted,
                retry_count=retry_count,
                execution_time_ms=execution_time_ms,
                message=message,
            )
            return outcome

    async def _record(self, log: JobLogAdapter, job_id: int, status: JobStatus, **fields) -> None:
        """Best-effort ledger update; failures are logged and swallowed."""
        try:
            await self.ledger.update(job_id, status, **fields)
        except LedgerUpdateError as e:
            log.error(
                f"could not persist status {status.value}: {e.message}",
                extra={"error_context": e.to_dict()}
            )
        except Exception as e:
            log.exception(f"could not persist status {status.value}: {e}")

    def _elapsed_ms(self, started: float) -> int:
        return int((self.clock() - started) * 1000)
