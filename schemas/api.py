"""
Pydantic schemas for API response models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from models.base import JobStatus


# ============================================================================
# Ledger Schemas
# ============================================================================

class CronJobInfo(BaseModel):
    """One execution ledger row"""
    job_id: int
    job_name: str
    job_date: date
    job_params: Optional[str] = None
    job_status: JobStatus
    message: Optional[str] = None
    execution_time_ms: int = 0
    retry_count: int = 0
    max_retries: int = 3
    created_at: datetime
    updated_at: datetime
    finished_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        use_enum_values = True


class CronJobListResponse(BaseModel):
    """Response for ledger listings"""
    request_id: str
    count: int
    jobs: List[CronJobInfo] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "request_id": "req_3f9a2c1b7d4e",
                "count": 1,
                "jobs": [
                    {
                        "job_id": 42,
                        "job_name": "golf_summary",
                        "job_date": "2024-01-15",
                        "job_params": "{\"db_id\":\"GC\",\"job_date\":\"2024-01-15\",\"kind\":\"golf_summary\"}",
                        "job_status": "finished",
                        "message": "Fetched 1 records, inserted 1, skipped 0 duplicates",
                        "execution_time_ms": 812,
                        "retry_count": 0,
                        "max_retries": 3,
                        "created_at": "2024-01-15T12:00:00",
                        "updated_at": "2024-01-15T12:00:01",
                        "finished_at": "2024-01-15T12:00:01"
                    }
                ]
            }
        }


# ============================================================================
# Health Check Schemas
# ============================================================================

class ScheduledJobInfo(BaseModel):
    """A registered trigger"""
    id: str
    next_run_time: Optional[datetime] = None


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    unfinished_jobs: int = 0
    failed_jobs: int = 0
    scheduler_running: bool = False
    scheduled_jobs: List[ScheduledJobInfo] = Field(default_factory=list)
