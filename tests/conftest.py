"""
Pytest configuration and fixtures
"""

import os

# Must be set before core.config is imported anywhere
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import date
from itertools import count
from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ingestion.jobs import FUNERAL_INVOICE_JOB, JobDefinition
from ingestion.ledger import ExecutionLedger
from ingestion.loaders.store_writer import IdempotentStoreWriter
from ingestion.sources.base import DataSource
from models.base import Base
from models.funeral_invoice import FuneralInvoice
from schemas.params import FuneralInvoiceParams
from schemas.records import FuneralInvoiceRecord


class FakeSource(DataSource):
    """Data source returning scripted results; exceptions in the script are raised."""

    name = "fake"

    def __init__(self, *results):
        super().__init__()
        self.results = list(results)
        self.calls: List = []

    async def fetch(self, params):
        self.calls.append(params)
        outcome = self.results[min(len(self.calls), len(self.results)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class SleepRecorder:
    """Stands in for asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest_asyncio.fixture(scope="function")
async def bare_engine():
    """In-memory engine without any tables"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_engine(bare_engine):
    """In-memory engine with the full schema"""
    await ExecutionLedger.init_schema(bare_engine)
    yield bare_engine
    async with bare_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def ledger(session_maker) -> ExecutionLedger:
    return ExecutionLedger(session_maker)


@pytest.fixture
def invoice_writer(session_maker) -> IdempotentStoreWriter:
    return IdempotentStoreWriter(session_maker, FuneralInvoice)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def fake_clock():
    """Clock advancing 250ms per call, so every measured step costs 250ms"""
    ticks = count(0.0, 0.25)
    return lambda: next(ticks)


@pytest.fixture
def job_date() -> date:
    return date(2024, 1, 15)


@pytest.fixture
def invoice_records(job_date) -> List[FuneralInvoiceRecord]:
    """Three invoices, two of them sharing the (invoice_date, customer_id) key"""
    return [
        FuneralInvoiceRecord(invoice_date=job_date, customer_id="A123456789", total_amount=1500),
        FuneralInvoiceRecord(invoice_date=job_date, customer_id="B223456789", total_amount=820),
        FuneralInvoiceRecord(invoice_date=job_date, customer_id="A123456789", total_amount=1500),
    ]


def make_invoice_job(source: DataSource, writer) -> JobDefinition:
    return JobDefinition(
        name=FUNERAL_INVOICE_JOB,
        key=FUNERAL_INVOICE_JOB,
        source=source,
        writer=writer,
        build_params=lambda d: FuneralInvoiceParams(job_date=d),
        schedule="0 6 * * *",
    )
