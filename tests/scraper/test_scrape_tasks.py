"""Unit tests for the scrape job Celery task and its DB helpers.

Database access is replaced by a mocked synchronous session; the worker
loop is replaced by a patched ``_scrape`` so no HTTP traffic happens.
"""

from __future__ import annotations

import json
import uuid
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fmcsa_registry.core.exceptions import ScrapeJobError
from fmcsa_registry.scraper.filters import ScrapeRequest
from fmcsa_registry.scraper.tasks import (
    _complete_job,
    _load_job,
    _run_scrape_job,
    _update_job,
    run_scrape_job_task,
)
from tests.factories import CarrierRecordFactory, ScrapeJobFactory

_TASKS = "fmcsa_registry.scraper.tasks"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_sync_session(*, rowcount: int = 1, row: Any = None) -> MagicMock:
    session = MagicMock()
    session.__enter__ = MagicMock(return_value=session)
    session.__exit__ = MagicMock(return_value=False)
    session.execute.return_value.rowcount = rowcount
    session.execute.return_value.fetchone.return_value = row
    return session


def _make_job(**overrides: Any) -> dict[str, Any]:
    job = ScrapeJobFactory.build(**overrides)
    job["id"] = str(job["id"])
    job["user_id"] = str(job["user_id"])
    return job


# ---------------------------------------------------------------------------
# DB helpers
# ---------------------------------------------------------------------------


class TestLoadJob:
    def test_returns_none_when_not_found(self) -> None:
        session = _mock_sync_session(row=None)
        with patch(
            "fmcsa_registry.core.database.get_sync_session", return_value=session
        ):
            assert _load_job(str(uuid.uuid4())) is None

    def test_returns_row_mapping(self) -> None:
        row = MagicMock()
        row._mapping = {"id": "abc", "status": "processing"}
        session = _mock_sync_session(row=row)
        with patch(
            "fmcsa_registry.core.database.get_sync_session", return_value=session
        ):
            assert _load_job("abc") == {"id": "abc", "status": "processing"}


class TestUpdateJob:
    def test_builds_set_clause_and_commits(self) -> None:
        session = _mock_sync_session()
        with patch(
            "fmcsa_registry.core.database.get_sync_session", return_value=session
        ):
            _update_job("job-1", status="failed", error_message="boom")

        stmt, params = session.execute.call_args.args
        assert "status = :status" in str(stmt)
        assert "error_message = :error_message" in str(stmt)
        assert params == {"job_id": "job-1", "status": "failed", "error_message": "boom"}
        session.commit.assert_called_once()

    def test_no_kwargs_is_a_no_op(self) -> None:
        with patch("fmcsa_registry.core.database.get_sync_session") as mock_factory:
            _update_job("job-1")
        mock_factory.assert_not_called()

    def test_db_error_is_logged_not_raised(self) -> None:
        with patch(
            "fmcsa_registry.core.database.get_sync_session",
            side_effect=RuntimeError("db down"),
        ):
            _update_job("job-1", status="failed")


class TestCompleteJob:
    def test_stores_results_and_charges_quota(self) -> None:
        session = _mock_sync_session(rowcount=1)
        records = [CarrierRecordFactory(), CarrierRecordFactory()]

        with (
            patch("fmcsa_registry.core.database.get_sync_session", return_value=session),
            patch("fmcsa_registry.core.quota_service.consume_records_sync") as mock_consume,
        ):
            assert _complete_job("job-1", "user-1", records, 100) is True

        params = session.execute.call_args.args[1]
        assert params["records_found"] == 2
        assert params["job_id"] == "job-1"
        stored = json.loads(params["result_data"])
        assert [r["mc_number"] for r in stored] == [r.mc_number for r in records]
        mock_consume.assert_called_once_with(session, "user-1", 100)
        session.commit.assert_called_once()

    def test_already_settled_job_is_not_charged_twice(self) -> None:
        session = _mock_sync_session(rowcount=0)

        with (
            patch("fmcsa_registry.core.database.get_sync_session", return_value=session),
            patch("fmcsa_registry.core.quota_service.consume_records_sync") as mock_consume,
        ):
            assert _complete_job("job-1", "user-1", [], 100) is False

        mock_consume.assert_not_called()
        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    def test_empty_result_still_charges(self) -> None:
        session = _mock_sync_session(rowcount=1)

        with (
            patch("fmcsa_registry.core.database.get_sync_session", return_value=session),
            patch("fmcsa_registry.core.quota_service.consume_records_sync") as mock_consume,
        ):
            assert _complete_job("job-1", "user-1", [], 5) is True

        assert json.loads(session.execute.call_args.args[1]["result_data"]) == []
        mock_consume.assert_called_once_with(session, "user-1", 5)


# ---------------------------------------------------------------------------
# _run_scrape_job
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
class TestRunScrapeJob:
    async def test_success_completes_job_with_records(self) -> None:
        job = _make_job(start_point=1580000, records=25, carriers=True, authorized=True)
        records = [CarrierRecordFactory()]

        with (
            patch(f"{_TASKS}._load_job", return_value=job),
            patch(f"{_TASKS}._update_job") as mock_update,
            patch(
                f"{_TASKS}._scrape",
                new_callable=AsyncMock,
                return_value=(records, MagicMock()),
            ) as mock_scrape,
            patch(f"{_TASKS}._complete_job", return_value=True) as mock_complete,
        ):
            result = await _run_scrape_job(job["id"], "celery-123")

        assert result == {"job_id": job["id"], "status": "completed", "records_found": 1}
        assert mock_update.call_args.kwargs["celery_task_id"] == "celery-123"
        request = mock_scrape.call_args.args[0]
        assert request == ScrapeRequest(
            start_id=1580000,
            count=25,
            want_carriers=True,
            want_brokers=False,
            want_authorized=True,
            want_standard=False,
        )
        mock_complete.assert_called_once_with(job["id"], job["user_id"], records, 25)

    async def test_missing_job_raises(self) -> None:
        with patch(f"{_TASKS}._load_job", return_value=None):
            with pytest.raises(ScrapeJobError):
                await _run_scrape_job(str(uuid.uuid4()), None)

    @pytest.mark.parametrize("status", ["completed", "failed"])
    async def test_terminal_job_is_skipped(self, status: str) -> None:
        job = _make_job(status=status)

        with (
            patch(f"{_TASKS}._load_job", return_value=job),
            patch(f"{_TASKS}._update_job") as mock_update,
            patch(f"{_TASKS}._scrape", new_callable=AsyncMock) as mock_scrape,
        ):
            result = await _run_scrape_job(job["id"], None)

        assert result["status"] == status
        mock_scrape.assert_not_awaited()
        mock_update.assert_not_called()

    async def test_redelivered_job_reports_no_new_records(self) -> None:
        job = _make_job()

        with (
            patch(f"{_TASKS}._load_job", return_value=job),
            patch(f"{_TASKS}._update_job"),
            patch(
                f"{_TASKS}._scrape",
                new_callable=AsyncMock,
                return_value=([], MagicMock()),
            ),
            patch(f"{_TASKS}._complete_job", return_value=False),
        ):
            result = await _run_scrape_job(job["id"], None)

        assert result["records_found"] is None


# ---------------------------------------------------------------------------
# Celery task wrapper
# ---------------------------------------------------------------------------


class TestRunScrapeJobTask:
    def test_returns_engine_result(self) -> None:
        expected = {"job_id": "job-1", "status": "completed", "records_found": 0}
        with patch(
            f"{_TASKS}._run_scrape_job", new_callable=AsyncMock, return_value=expected
        ):
            assert run_scrape_job_task("job-1") == expected

    def test_failure_marks_job_failed_and_reraises(self) -> None:
        with (
            patch(
                f"{_TASKS}._run_scrape_job",
                new_callable=AsyncMock,
                side_effect=RuntimeError("worker crashed"),
            ),
            patch(f"{_TASKS}._update_job") as mock_update,
        ):
            with pytest.raises(RuntimeError, match="worker crashed"):
                run_scrape_job_task("job-1")

        args, kwargs = mock_update.call_args
        assert args == ("job-1",)
        assert kwargs["status"] == "failed"
        assert kwargs["error_message"] == "worker crashed"
        assert kwargs["completed_at"] is not None

    def test_task_is_routed_to_scraping_queue(self) -> None:
        from fmcsa_registry.workers.celery_app import celery_app  # noqa: PLC0415

        routes = celery_app.conf.task_routes
        assert routes[run_scrape_job_task.name] == {"queue": "scraping"}
        assert run_scrape_job_task.max_retries == 0
