"""
Run one job immediately, outside the schedule.

Usage:
    python scripts/run_job.py --job funeral_invoice --date 2024-01-15
    python scripts/run_job.py --job golf_summary --site GC
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import date

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import engine, async_session_maker
from core.exceptions import LedgerError
from core.logging import setup_logging
from ingestion.jobs import build_jobs, find_job, resolve_job_date
from ingestion.ledger import ExecutionLedger
from ingestion.orchestrator import RetryOrchestrator

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run one sync job now")
    parser.add_argument("--job", required=True, help="Job name (funeral_invoice, golf_summary)")
    parser.add_argument("--site", help="Golf site id for golf_summary (e.g. GC)")
    parser.add_argument("--date", type=date.fromisoformat, help="Business date, default today")
    parser.add_argument("--max-retries", type=int, default=settings.MAX_RETRIES)
    return parser.parse_args(argv)


async def run_job(args) -> int:
    ledger = ExecutionLedger(async_session_maker)
    orchestrator = RetryOrchestrator(ledger)

    try:
        await ledger.init_schema(engine)
        job = find_job(build_jobs(async_session_maker), args.job, args.site)
        job_date = args.date or resolve_job_date(job.date_rule)

        outcome = await orchestrator.execute(job, job_date, max_retries=args.max_retries)
        print(json.dumps(outcome, indent=2, default=str))
        return 0 if outcome["status"] == "finished" else 1

    except KeyError as e:
        logger.error(str(e))
        return 2
    except LedgerError as e:
        logger.error(f"Job not started: {e}")
        return 1
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_job(parse_args())))
