import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import engine
from core.logging import setup_logging
from ingestion.ledger import ExecutionLedger

logger = logging.getLogger(__name__)


async def init_database():
    logger.info("Connecting to database...")
    try:
        await ExecutionLedger.init_schema(engine)
        logger.info("Tables created successfully.")
    finally:
        await engine.dispose()

if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
