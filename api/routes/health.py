"""
Health check endpoint with database and scheduler status
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, text
from api.dependencies import get_db
from schemas.api import HealthCheckResponse, ScheduledJobInfo
from models.base import JobStatus
from models.cron_job import CronJob
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Count of unfinished and failed ledger rows
    - Scheduler state and registered triggers
    """
    db_connected = False
    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    unfinished_jobs = 0
    failed_jobs = 0
    if db_connected:
        try:
            result = await db.execute(
                select(CronJob.job_status, func.count())
                .where(CronJob.job_status != JobStatus.FINISHED)
                .group_by(CronJob.job_status)
            )
            for status, count in result.all():
                unfinished_jobs += count
                if status == JobStatus.FAILED:
                    failed_jobs = count
        except Exception as e:
            logger.error(f"Failed to count ledger rows: {str(e)}")

    registrar = getattr(request.app.state, "registrar", None)
    scheduler_running = bool(registrar and registrar.running)
    scheduled_jobs = []
    if registrar is not None:
        scheduled_jobs = [ScheduledJobInfo(**entry) for entry in registrar.entries()]

    if not db_connected:
        status = "unhealthy"
    elif failed_jobs > 0:
        status = "degraded"
    else:
        status = "healthy"

    return HealthCheckResponse(
        status=status,
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        unfinished_jobs=unfinished_jobs,
        failed_jobs=failed_jobs,
        scheduler_running=scheduler_running,
        scheduled_jobs=scheduled_jobs
    )
