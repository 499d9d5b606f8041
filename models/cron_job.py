from sqlalchemy import (
    Column, BigInteger, Integer, String, Date, DateTime, Text, Enum, Index, UniqueConstraint
)
from datetime import datetime
from models.base import Base, JobStatus


class CronJob(Base):
    """
    Execution ledger: one row per logical job submission.

    Purpose:
    - Audit trail of every triggered execution and its retries
    - Duplicate-submission suppression via (job_name, job_date, job_params_hash)
    - Operational polling of unfinished work

    Design:
    - job_params holds the serialized parameter bag, opaque to the engine
    - job_params_hash is the SHA-256 of job_params, part of the natural key
    - finished_at is set only when job_status becomes finished or failed
    """
    __tablename__ = "cron_jobs"

    job_id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    # Logical identity
    job_name = Column(String(100), nullable=False)
    job_date = Column(Date, nullable=False)
    job_params = Column(Text, nullable=True)
    job_params_hash = Column(String(64), nullable=False)

    # Execution state
    job_status = Column(
        Enum(
            JobStatus,
            native_enum=False,
            length=10,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=JobStatus.PENDING,
        nullable=False,
    )
    message = Column(Text, nullable=True)
    execution_time_ms = Column(BigInteger, nullable=False, default=0)
    retry_count = Column(Integer, nullable=False, default=0)
    max_retries = Column(Integer, nullable=False, default=3)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    finished_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("job_name", "job_date", "job_params_hash", name="uq_cron_jobs_job"),
        Index("idx_cron_jobs_status", "job_status"),
        Index("idx_cron_jobs_job_name_date", "job_name", "job_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<CronJob job_id={self.job_id} job_name={self.job_name} "
            f"job_date={self.job_date} status={self.job_status}>"
        )
