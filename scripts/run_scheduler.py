"""
Run the trigger registrar as a standalone process until SIGINT/SIGTERM.
"""

import asyncio
import logging
import os
import signal
import sys

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import engine, async_session_maker
from core.logging import setup_logging
from ingestion.jobs import build_jobs
from ingestion.ledger import ExecutionLedger
from ingestion.orchestrator import RetryOrchestrator
from ingestion.scheduler import TriggerRegistrar

logger = logging.getLogger(__name__)


async def main():
    ledger = ExecutionLedger(async_session_maker)
    registrar = TriggerRegistrar(engine, ledger, RetryOrchestrator(ledger))

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await registrar.start(build_jobs(async_session_maker))
        registrar.show_entries()
        logger.info(f"Scheduler running in {settings.ENVIRONMENT} ({settings.TIMEZONE})")

        await stop_event.wait()
        logger.info("Shutdown signal received, exiting")
    finally:
        registrar.stop()
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
