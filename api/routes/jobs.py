"""
Execution ledger inspection endpoints
"""

from datetime import date
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from api.dependencies import get_ledger
from ingestion.ledger import ExecutionLedger
from schemas.api import CronJobInfo, CronJobListResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("", response_model=CronJobListResponse)
async def list_recent_jobs(
    request: Request,
    limit: int = Query(20, ge=1, le=500, description="Number of executions to return"),
    ledger: ExecutionLedger = Depends(get_ledger)
):
    """Most recent job executions, newest first."""
    request_id = request.state.request_id
    logger.info(f"[{request_id}] GET /jobs limit={limit}")

    jobs = await ledger.list_recent(limit)
    return CronJobListResponse(
        request_id=request_id,
        count=len(jobs),
        jobs=[CronJobInfo.model_validate(job) for job in jobs]
    )


@router.get("/unfinished", response_model=CronJobListResponse)
async def list_unfinished_jobs(
    request: Request,
    job_name: Optional[str] = Query(None, description="Filter by job name"),
    job_date: Optional[date] = Query(None, description="Filter by business date"),
    ledger: ExecutionLedger = Depends(get_ledger)
):
    """Executions not in ``finished`` status (pending, running, retrying, failed)."""
    request_id = request.state.request_id
    logger.info(f"[{request_id}] GET /jobs/unfinished job_name={job_name} job_date={job_date}")

    jobs = await ledger.list_unfinished(job_name=job_name, job_date=job_date)
    return CronJobListResponse(
        request_id=request_id,
        count=len(jobs),
        jobs=[CronJobInfo.model_validate(job) for job in jobs]
    )


@router.get("/{job_id}", response_model=CronJobInfo)
async def get_job(job_id: int, ledger: ExecutionLedger = Depends(get_ledger)):
    job = await ledger.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return CronJobInfo.model_validate(job)
