"""
Job execution engine.

Modules:
    backoff: Exponential backoff policy between fetch attempts
    ledger: Execution ledger (cron_jobs) create/update/inspection
    orchestrator: Retry orchestrator driving one job through fetch-then-store
    jobs: Job catalog and business-date rules
    scheduler: APScheduler trigger registrar

Subpackages:
    sources: Remote data source adapters (ERP invoices, golf reservations)
    loaders: Idempotent store writer

Architecture:
    Trigger fires → orchestrator creates ledger row → source.fetch() →
    writer.store() → ledger terminal status. Fetch failures are retried with
    backoff; storage failures are permanent.

Usage:
    from core.database import engine, async_session_maker
    from ingestion.jobs import build_jobs
    from ingestion.ledger import ExecutionLedger
    from ingestion.orchestrator import RetryOrchestrator
    from ingestion.scheduler import TriggerRegistrar

    ledger = ExecutionLedger(async_session_maker)
    registrar = TriggerRegistrar(engine, ledger, RetryOrchestrator(ledger))
    await registrar.start(build_jobs(async_session_maker))
"""

__all__ = [
    "backoff",
    "ledger",
    "orchestrator",
    "jobs",
    "scheduler",
]
