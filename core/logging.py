"""
Logging configuration for the job engine and API.

Every record carries a ``job`` field: the execution tag (``job_id key date``)
for lines emitted through :class:`JobLogAdapter`, ``-`` for everything else.
"""

import logging
import sys
from datetime import date
from typing import Optional

from core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(job)s | %(message)s"

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "apscheduler",
    "asyncio",
)


class JobContextFilter(logging.Filter):
    """Default the ``job`` field so the shared format works for every logger"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "job"):
            record.job = "-"
        return True


class JobLogAdapter(logging.LoggerAdapter):
    """
    Tags every line with one execution's identity.

    Usage:
        log = JobLogAdapter(logger, job_id=7, job_key="golf_summary:GC", job_date=day)
        log.info("attempt 1 of 4")
    """

    def __init__(self, logger: logging.Logger, job_id: int, job_key: str, job_date: date):
        super().__init__(logger, {
            "job": f"job_id={job_id} {job_key} {job_date.isoformat()}",
            "job_id": job_id,
        })

    def process(self, msg, kwargs):
        extra = dict(self.extra)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(level: Optional[str] = None):
    """Configure application logging; ``level`` overrides settings.LOG_LEVEL"""
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(JobContextFilter())

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[handler]
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {level_name} level ({settings.ENVIRONMENT})")
