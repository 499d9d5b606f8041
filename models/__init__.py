"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and the JobStatus enum
    cron_job: Execution ledger (one row per logical job submission)
    funeral_invoice: ERP funeral invoices (insert-only fact table)
    reservation_summary: Golf reservation summaries (insert-only fact table)

Each fact table carries a unique constraint on its natural key so the
store writer can insert-if-absent and re-runs never double count.

Usage:
    from models.base import Base, JobStatus
    from models.cron_job import CronJob
    from models.funeral_invoice import FuneralInvoice
    from models.reservation_summary import GolfReservationSummary
"""

__all__ = [
    "base",
    "cron_job",
    "funeral_invoice",
    "reservation_summary",
]
