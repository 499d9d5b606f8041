"""
Unit tests for job-aware logging
"""

import logging
from datetime import date

from core.logging import JobContextFilter, JobLogAdapter


def test_adapter_tags_lines_with_execution(caplog):
    log = JobLogAdapter(logging.getLogger("ingestion.orchestrator"), 7, "golf_summary:GC", date(2024, 1, 15))

    with caplog.at_level(logging.INFO):
        log.info("attempt 1 of 4", extra={"attempt": 1})

    record = caplog.records[-1]
    assert record.job == "job_id=7 golf_summary:GC 2024-01-15"
    assert record.job_id == 7
    assert record.attempt == 1
    assert record.getMessage() == "attempt 1 of 4"


def test_filter_defaults_job_field():
    record = logging.LogRecord("api.main", logging.INFO, __file__, 1, "started", None, None)

    assert JobContextFilter().filter(record) is True
    assert record.job == "-"


def test_filter_keeps_existing_job_field():
    record = logging.LogRecord("ingestion.orchestrator", logging.INFO, __file__, 1, "done", None, None)
    record.job = "job_id=3 funeral_invoice 2024-01-15"

    JobContextFilter().filter(record)

    assert record.job == "job_id=3 funeral_invoice 2024-01-15"
