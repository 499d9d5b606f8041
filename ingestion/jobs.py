"""
Logical job catalog.

A ``JobDefinition`` ties a job name to its data source, its store writer,
the parameter bag built for each business date, the crontab schedule and
the rule that turns a trigger time into a business date.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import settings
from ingestion.loaders.store_writer import IdempotentStoreWriter
from ingestion.sources.base import DataSource, EngineFactory
from ingestion.sources.erp import FuneralInvoiceSource
from ingestion.sources.golf import GolfReservationSource
from models.funeral_invoice import FuneralInvoice
from models.reservation_summary import GolfReservationSummary
from schemas.params import FuneralInvoiceParams, GolfSummaryParams

FUNERAL_INVOICE_JOB = "funeral_invoice"
GOLF_SUMMARY_JOB = "golf_summary"

DATE_RULES = ("today", "yesterday")


@dataclass(frozen=True)
class JobDefinition:
    name: str
    key: str
    source: DataSource
    writer: IdempotentStoreWriter
    build_params: Callable[[date], BaseModel]
    schedule: str
    date_rule: str = "today"


def resolve_job_date(rule: str, now: Optional[datetime] = None) -> date:
    """Business date targeted by a trigger firing at ``now`` (local time)."""
    if now is None:
        now = datetime.now(ZoneInfo(settings.TIMEZONE))

    if rule == "today":
        return now.date()
    if rule == "yesterday":
        return now.date() - timedelta(days=1)
    raise ValueError(f"Unknown date rule '{rule}', expected one of {DATE_RULES}")


def funeral_invoice_job(
    session_maker: async_sessionmaker[AsyncSession],
    engine_factory: Optional[EngineFactory] = None
) -> JobDefinition:
    return JobDefinition(
        name=FUNERAL_INVOICE_JOB,
        key=FUNERAL_INVOICE_JOB,
        source=FuneralInvoiceSource(engine_factory),
        writer=IdempotentStoreWriter(session_maker, FuneralInvoice),
        build_params=lambda job_date: FuneralInvoiceParams(job_date=job_date),
        schedule=settings.FUNERAL_INVOICE_SCHEDULE,
    )


def golf_summary_job(
    session_maker: async_sessionmaker[AsyncSession],
    site_id: str,
    engine_factory: Optional[EngineFactory] = None
) -> JobDefinition:
    site_id = site_id.upper()
    return JobDefinition(
        name=GOLF_SUMMARY_JOB,
        key=f"{GOLF_SUMMARY_JOB}:{site_id}",
        source=GolfReservationSource(engine_factory),
        writer=IdempotentStoreWriter(session_maker, GolfReservationSummary),
        build_params=lambda job_date: GolfSummaryParams(db_id=site_id, job_date=job_date),
        schedule=settings.GOLF_SUMMARY_SCHEDULE,
    )


def build_jobs(
    session_maker: async_sessionmaker[AsyncSession],
    engine_factory: Optional[EngineFactory] = None
) -> List[JobDefinition]:
    """Every job the scheduler runs: the ERP invoices and one golf job per site."""
    jobs = [funeral_invoice_job(session_maker, engine_factory)]
    jobs.extend(
        golf_summary_job(session_maker, site_id, engine_factory)
        for site_id in settings.GOLF_SITES
    )
    return jobs


def find_job(jobs: List[JobDefinition], name: str, site_id: Optional[str] = None) -> JobDefinition:
    key = f"{name}:{site_id.upper()}" if site_id else name
    for job in jobs:
        if job.key == key:
            return job
    raise KeyError(f"No job registered under '{key}'")
