"""
Unit tests for the retry orchestrator
"""

from unittest.mock import AsyncMock, call

import pytest

from conftest import FakeSource, make_invoice_job
from core.exceptions import LedgerCreateError, LedgerUpdateError, StoreError
from ingestion.ledger import ExecutionLedger
from ingestion.orchestrator import RetryOrchestrator
from models.base import JobStatus


@pytest.fixture
def mock_ledger():
    ledger = AsyncMock(spec=ExecutionLedger)
    ledger.create.return_value = 7
    ledger.update.return_value = True
    return ledger


@pytest.fixture
def mock_writer():
    writer = AsyncMock()
    writer.store.return_value = 2
    return writer


@pytest.fixture
def orchestrator(mock_ledger, sleep_recorder, fake_clock):
    return RetryOrchestrator(
        mock_ledger,
        sleep=sleep_recorder,
        clock=fake_clock,
        backoff_base_seconds=60
    )


def statuses(ledger):
    return [c.args[1] for c in ledger.update.call_args_list]


class TestSuccessfulExecution:

    @pytest.mark.asyncio
    async def test_fetch_and_store_finishes(self, orchestrator, mock_ledger, mock_writer, invoice_records, job_date):
        source = FakeSource(invoice_records)
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date, max_retries=3)

        assert outcome["status"] == "finished"
        assert outcome["job_id"] == 7
        assert outcome["records_fetched"] == 3
        assert outcome["records_inserted"] == 2
        assert outcome["retry_count"] == 0
        assert outcome["execution_time_ms"] == 500
        assert "inserted 2" in outcome["message"]

        mock_writer.store.assert_awaited_once_with(invoice_records)
        assert statuses(mock_ledger) == [JobStatus.RUNNING, JobStatus.FINISHED]
        final = mock_ledger.update.call_args_list[-1]
        assert final.kwargs["execution_time_ms"] == 500
        assert final.kwargs["retry_count"] == 0

    @pytest.mark.asyncio
    async def test_ledger_row_created_with_params(self, orchestrator, mock_ledger, mock_writer, job_date):
        job = make_invoice_job(FakeSource([]), mock_writer)

        await orchestrator.execute(job, job_date, max_retries=5)

        name, created_date, params, max_retries = mock_ledger.create.call_args.args
        assert (name, created_date, max_retries) == ("funeral_invoice", job_date, 5)
        assert params.job_date == job_date

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, orchestrator, mock_ledger, mock_writer, sleep_recorder, invoice_records, job_date):
        source = FakeSource(ConnectionError("ora-12541"), ConnectionError("ora-12541"), invoice_records)
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date, max_retries=3)

        assert outcome["status"] == "finished"
        assert outcome["retry_count"] == 2
        assert len(source.calls) == 3
        assert sleep_recorder.delays == [60, 120]
        assert statuses(mock_ledger) == [
            JobStatus.RUNNING,
            JobStatus.RETRYING,
            JobStatus.RETRYING,
            JobStatus.RETRYING,
            JobStatus.RETRYING,
            JobStatus.FINISHED,
        ]


class TestFetchFailures:

    @pytest.mark.asyncio
    async def test_exhausted_retries_mark_failed(self, orchestrator, mock_ledger, mock_writer, sleep_recorder, job_date):
        source = FakeSource(*[RuntimeError(f"timeout {n}") for n in range(1, 5)])
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date, max_retries=3)

        assert outcome["status"] == "failed"
        assert outcome["retry_count"] == 3
        assert "timeout 4" in outcome["message"]
        assert len(source.calls) == 4
        assert sleep_recorder.delays == [60, 120, 240]
        mock_writer.store.assert_not_awaited()

        final = mock_ledger.update.call_args_list[-1]
        assert final.args[1] == JobStatus.FAILED
        assert final.kwargs["retry_count"] == 3
        assert "timeout 4" in final.kwargs["message"]
        # four fetches at 250ms each
        assert final.kwargs["execution_time_ms"] == 1000

    @pytest.mark.asyncio
    async def test_retrying_rows_record_pre_increment_attempt(self, orchestrator, mock_ledger, mock_writer, job_date):
        source = FakeSource(RuntimeError("down"))
        job = make_invoice_job(source, mock_writer)

        await orchestrator.execute(job, job_date, max_retries=2)

        recorded = [
            (c.args[1], c.kwargs.get("retry_count"))
            for c in mock_ledger.update.call_args_list
        ]
        assert recorded == [
            (JobStatus.RUNNING, 0),
            (JobStatus.RETRYING, 0),
            (JobStatus.RETRYING, 1),
            (JobStatus.RETRYING, 1),
            (JobStatus.RETRYING, 2),
            (JobStatus.FAILED, 2),
        ]
        assert all(count <= 2 for _, count in recorded)

    @pytest.mark.asyncio
    async def test_zero_retries_fails_after_one_attempt(self, orchestrator, mock_writer, sleep_recorder, job_date):
        source = FakeSource(RuntimeError("down"))
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date, max_retries=0)

        assert outcome["status"] == "failed"
        assert outcome["retry_count"] == 0
        assert len(source.calls) == 1
        assert sleep_recorder.delays == []


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_store_failure_is_not_retried(self, orchestrator, mock_ledger, mock_writer, sleep_recorder, invoice_records, job_date):
        mock_writer.store.side_effect = StoreError("Transaction failed; no records were stored")
        source = FakeSource(invoice_records)
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date, max_retries=3)

        assert outcome["status"] == "failed"
        assert outcome["records_fetched"] == 3
        assert outcome["records_inserted"] == 0
        assert "failed to store" in outcome["message"]
        assert len(source.calls) == 1
        mock_writer.store.assert_awaited_once()
        assert sleep_recorder.delays == []
        assert statuses(mock_ledger) == [JobStatus.RUNNING, JobStatus.FAILED]

    @pytest.mark.asyncio
    async def test_store_failure_after_retries_keeps_attempt_count(self, orchestrator, mock_ledger, mock_writer, invoice_records, job_date):
        mock_writer.store.side_effect = StoreError("disk full")
        source = FakeSource(RuntimeError("down"), invoice_records)
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date, max_retries=3)

        assert outcome["status"] == "failed"
        assert outcome["retry_count"] == 1
        assert len(source.calls) == 2
        assert mock_ledger.update.call_args_list[-1].kwargs["retry_count"] == 1


class TestLedgerFailures:

    @pytest.mark.asyncio
    async def test_create_failure_aborts_before_fetch(self, orchestrator, mock_ledger, mock_writer, job_date):
        mock_ledger.create.side_effect = LedgerCreateError("database is locked")
        source = FakeSource([])
        job = make_invoice_job(source, mock_writer)

        with pytest.raises(LedgerCreateError):
            await orchestrator.execute(job, job_date)

        assert source.calls == []
        mock_ledger.update.assert_not_awaited()
        mock_writer.store.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_failures_do_not_stop_the_job(self, orchestrator, mock_ledger, mock_writer, sleep_recorder, invoice_records, job_date):
        mock_ledger.update.side_effect = LedgerUpdateError("database is locked")
        source = FakeSource(RuntimeError("down"), invoice_records)
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date, max_retries=3)

        assert outcome["status"] == "finished"
        assert len(source.calls) == 2
        assert sleep_recorder.delays == [60]
        mock_writer.store.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_default_max_retries_from_settings(self, orchestrator, mock_ledger, mock_writer, job_date, monkeypatch):
        from core.config import settings

        monkeypatch.setattr(settings, "MAX_RETRIES", 1)
        source = FakeSource(RuntimeError("down"))
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date)

        assert outcome["retry_count"] == 1
        assert len(source.calls) == 2
        assert mock_ledger.create.call_args.args[3] == 1

    @pytest.mark.asyncio
    async def test_connection_loss_during_updates_does_not_stop_the_job(self, orchestrator, mock_ledger, mock_writer, invoice_records, job_date):
        mock_ledger.update.side_effect = ConnectionRefusedError(111, "Connect call failed")
        source = FakeSource(invoice_records)
        job = make_invoice_job(source, mock_writer)

        outcome = await orchestrator.execute(job, job_date)

        assert outcome["status"] == "finished"
        assert outcome["records_inserted"] == 2
        mock_writer.store.assert_awaited_once()
        assert statuses(mock_ledger) == [JobStatus.RUNNING, JobStatus.FINISHED]
