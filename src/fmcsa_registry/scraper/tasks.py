"""Celery task that executes a scrape job.

``run_scrape_job_task``
    Loads the job row, runs :class:`~fmcsa_registry.scraper.worker.ScrapeWorker`
    over the requested range, and records the terminal outcome.

Task naming convention::

    fmcsa_registry.scraper.tasks.<action>

Retry policy:
    Scraping a range takes minutes and re-running it would re-hit the
    upstream site, so ``max_retries=0``.  Per-identifier errors are handled
    inside the worker loop.

Terminal bookkeeping:
    On success the job is marked ``completed`` with its records and the
    user's quota is charged by the requested range size, both in one
    transaction.  The ``WHERE status = 'processing'`` guard makes a
    redelivered task a no-op instead of a second charge.  On failure the
    job is marked ``failed`` and nothing is charged.

Database updates:
    All DB writes use a synchronous session (``get_sync_session()``) to avoid
    running a nested event loop inside the Celery worker process.
"""

from __future__ import annotations

import asyncio
import functools
import json
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from fmcsa_registry.config.settings import get_settings
from fmcsa_registry.core.exceptions import ScrapeJobError
from fmcsa_registry.core.logging_config import bind_job_context
from fmcsa_registry.scraper.filters import ScrapeRequest
from fmcsa_registry.scraper.http_fetcher import fetch_snapshot
from fmcsa_registry.scraper.locators import get_locator_class
from fmcsa_registry.scraper.record_extractor import CarrierRecord
from fmcsa_registry.scraper.worker import ScrapeWorker
from fmcsa_registry.workers.celery_app import celery_app

logger = logging.getLogger(__name__)

_TERMINAL_STATUSES = frozenset({"completed", "failed"})


# ---------------------------------------------------------------------------
# Internal DB helpers (synchronous)
# ---------------------------------------------------------------------------


def _load_job(job_id: str) -> dict[str, Any] | None:
    """Load a ScrapeJob row by ID using a synchronous session.

    Returns the raw dict of column values, or ``None`` if not found.
    """
    from fmcsa_registry.core.database import get_sync_session  # noqa: PLC0415
    from sqlalchemy import text  # noqa: PLC0415

    with get_sync_session() as session:
        row = session.execute(
            text(
                """
                SELECT id, user_id, start_point, records, carriers, brokers,
                       authorized, standard, status
                FROM scrape_jobs
                WHERE id = :job_id
                """
            ),
            {"job_id": job_id},
        ).fetchone()
        if row is None:
            return None
        return dict(row._mapping)


def _update_job(job_id: str, **kwargs: Any) -> None:
    """Update scrape_jobs columns in a best-effort synchronous write."""
    if not kwargs:
        return
    from fmcsa_registry.core.database import get_sync_session  # noqa: PLC0415
    from sqlalchemy import text  # noqa: PLC0415

    set_clauses = ", ".join(f"{k} = :{k}" for k in kwargs)
    params = {"job_id": job_id, **kwargs}
    try:
        with get_sync_session() as session:
            session.execute(
                text(f"UPDATE scrape_jobs SET {set_clauses} WHERE id = :job_id"),
                params,
            )
            session.commit()
    except Exception as exc:  # noqa: BLE001
        logger.warning("scraper: failed to update scrape_jobs(%s): %s", job_id, exc)


def _complete_job(
    job_id: str,
    user_id: str,
    records: list[CarrierRecord],
    charge: int,
) -> bool:
    """Store results, mark the job completed and charge the quota atomically.

    Returns:
        ``True`` if this call completed the job, ``False`` if it was no
        longer ``processing`` (already settled by an earlier delivery).
    """
    from fmcsa_registry.core.database import get_sync_session  # noqa: PLC0415
    from fmcsa_registry.core.quota_service import consume_records_sync  # noqa: PLC0415
    from sqlalchemy import text  # noqa: PLC0415

    payload = json.dumps([record.to_dict() for record in records])

    with get_sync_session() as session:
        result = session.execute(
            text(
                """
                UPDATE scrape_jobs
                SET status = 'completed',
                    result_data = CAST(:result_data AS JSONB),
                    records_found = :records_found,
                    completed_at = :completed_at
                WHERE id = :job_id
                  AND status = 'processing'
                """
            ),
            {
                "result_data": payload,
                "records_found": len(records),
                "completed_at": datetime.now(tz=timezone.utc),
                "job_id": job_id,
            },
        )
        if result.rowcount != 1:
            session.rollback()
            return False
        consume_records_sync(session, user_id, charge)
        session.commit()
    return True


# ---------------------------------------------------------------------------
# Async scraping engine
# ---------------------------------------------------------------------------


async def _scrape(request: ScrapeRequest) -> tuple[list[CarrierRecord], ScrapeWorker]:
    """Run the worker over *request* with settings-derived tuning."""
    settings = get_settings()
    locator_cls = get_locator_class(settings.extraction_strategy)

    async with httpx.AsyncClient(follow_redirects=True) as client:
        fetch = functools.partial(
            fetch_snapshot,
            client=client,
            url_template=settings.lookup_url_template,
            timeout=settings.scrape_timeout_seconds,
            user_agent=settings.scraper_user_agent,
        )
        worker = ScrapeWorker(
            fetch,
            delay_min=settings.scrape_delay_min,
            delay_max=settings.scrape_delay_max,
            locator_cls=locator_cls,
        )
        records = await worker.run(request)
    return records, worker


async def _run_scrape_job(job_id: str, celery_task_id: str | None) -> dict[str, Any]:
    """Async implementation of a scrape job.

    Args:
        job_id: UUID string of the ScrapeJob.
        celery_task_id: ID of the Celery task, stored on the row.

    Returns:
        Dict with ``job_id``, final ``status`` and ``records_found``.

    Raises:
        ScrapeJobError: If the job row does not exist.
    """
    job = _load_job(job_id)
    if job is None:
        raise ScrapeJobError("scrape job not found", job_id=job_id)

    bind_job_context(job_id, user_id=str(job["user_id"]))

    if job["status"] in _TERMINAL_STATUSES:
        logger.info("scraper: job %s already %s, skipping", job_id, job["status"])
        return {"job_id": job_id, "status": job["status"], "records_found": None}

    _update_job(
        job_id,
        celery_task_id=celery_task_id,
        started_at=datetime.now(tz=timezone.utc),
    )

    request = ScrapeRequest(
        start_id=int(job["start_point"]),
        count=int(job["records"]),
        want_carriers=bool(job["carriers"]),
        want_brokers=bool(job["brokers"]),
        want_authorized=bool(job["authorized"]),
        want_standard=bool(job["standard"]),
    )
    logger.info(
        "scraper: job %s scanning MC %d-%d",
        job_id,
        request.start_id,
        request.start_id + request.count,
    )

    records, _worker = await _scrape(request)

    if not _complete_job(job_id, str(job["user_id"]), records, request.count):
        logger.info("scraper: job %s settled by an earlier delivery", job_id)
        return {"job_id": job_id, "status": "completed", "records_found": None}

    logger.info("scraper: job %s completed with %d records", job_id, len(records))
    return {"job_id": job_id, "status": "completed", "records_found": len(records)}


# ---------------------------------------------------------------------------
# Celery task
# ---------------------------------------------------------------------------


@celery_app.task(
    name="fmcsa_registry.scraper.tasks.run_scrape_job_task",
    bind=True,
    acks_late=True,
    max_retries=0,
    soft_time_limit=43_200,  # 12 hours
    time_limit=46_800,       # 13 hours
)
def run_scrape_job_task(self: Any, job_id: str) -> dict[str, Any]:
    """Scrape the MC-number range of a ScrapeJob and record the outcome.

    Runs the async engine via ``asyncio.run()``.  Any exception that
    escapes the worker loop marks the job ``failed`` with the error text
    and is re-raised so Celery records the failure too.

    Args:
        job_id: UUID string of the ScrapeJob to execute.

    Returns:
        Dict with ``job_id``, final ``status`` and ``records_found``.
    """
    logger.info("scraper: run_scrape_job_task started for job=%s", job_id)
    try:
        return asyncio.run(_run_scrape_job(job_id, self.request.id))
    except Exception as exc:  # noqa: BLE001
        logger.error("scraper: run_scrape_job_task failed for job=%s: %s", job_id, exc)
        _update_job(
            job_id,
            status="failed",
            error_message=str(exc),
            completed_at=datetime.now(tz=timezone.utc),
        )
        raise
