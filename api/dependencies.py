"""
FastAPI dependencies
"""

from sqlalchemy.ext.asyncio import AsyncSession

from core.database import async_session_maker
from ingestion.ledger import ExecutionLedger


async def get_db() -> AsyncSession:
    """Database session per request"""
    async with async_session_maker() as session:
        yield session


def get_ledger() -> ExecutionLedger:
    return ExecutionLedger(async_session_maker)
