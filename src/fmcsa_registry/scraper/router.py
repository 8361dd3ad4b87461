"""FastAPI router for scrape jobs.

Accepts job submissions, lists and shows jobs, and serves completed
results as CSV.

Submission checks run in order and the first failure answers the request
with ``{"error": ...}``; no job row exists until every check has passed:

1. ``Authorization`` header present                 — 401 "Missing authorization header"
2. bearer token valid for an active account         — 401 "Unauthorized"
3. subscription status not ``inactive``             — 403 "No active subscription"
4. subscription end date not in the past            — 403 "Subscription expired"
5. ``records_remaining >= records``                 — 403 "Insufficient records remaining"
6. ``records <= max_records_per_job``               — 422

Read routes are owner-scoped; admin users bypass the ownership check.

Routes:
    POST   /scrape-jobs/                    — check, create + enqueue job
    GET    /scrape-jobs/                    — list own jobs, newest first
    GET    /scrape-jobs/{job_id}            — detail including results
    GET    /scrape-jobs/{job_id}/download   — results as CSV
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Optional

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fmcsa_registry.api.dependencies import (
    PaginationParams,
    get_current_active_user,
    get_optional_user,
    get_pagination,
    ownership_guard,
)
from fmcsa_registry.config.settings import get_settings
from fmcsa_registry.core.database import get_db
from fmcsa_registry.core.exceptions import InsufficientQuotaError, SubscriptionError
from fmcsa_registry.core.models.scrape_jobs import ScrapeJob
from fmcsa_registry.core.models.users import User
from fmcsa_registry.core.quota_service import QuotaService
from fmcsa_registry.core.schemas.scrape_jobs import (
    ScrapeJobAccepted,
    ScrapeJobCreate,
    ScrapeJobRead,
    ScrapeJobSummary,
)
from fmcsa_registry.scraper.csv_export import csv_filename, render_csv

logger = structlog.get_logger(__name__)

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"description": "Missing or invalid bearer token"},
    403: {"description": "Subscription or quota check failed"},
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def _get_job_or_404(
    job_id: uuid.UUID,
    db: AsyncSession,
) -> ScrapeJob:
    """Fetch a ScrapeJob by primary key or raise HTTP 404."""
    result = await db.execute(select(ScrapeJob).where(ScrapeJob.id == job_id))
    job = result.scalar_one_or_none()
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Scrape job '{job_id}' not found.",
        )
    return job


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@router.post(
    "/",
    response_model=ScrapeJobAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    responses=_ERROR_RESPONSES,
)
async def create_scrape_job(
    payload: ScrapeJobCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Optional[User], Depends(get_optional_user)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> Any:
    """Check the caller's subscription, create a job and enqueue it.

    The job row is inserted in ``'processing'`` status and
    :func:`~fmcsa_registry.scraper.tasks.run_scrape_job_task` is dispatched
    to the ``scraping`` queue.  The quota is charged only when the task
    completes.

    Returns:
        ``{"job_id": ..., "status": "processing"}``.

    Raises:
        HTTPException 422: If ``records`` exceeds the per-job maximum.
        HTTPException 503: If the task could not be enqueued.
    """
    if not authorization:
        return _error(status.HTTP_401_UNAUTHORIZED, "Missing authorization header")
    if current_user is None:
        return _error(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    try:
        QuotaService.ensure_can_scrape(current_user, payload.records)
    except InsufficientQuotaError as exc:
        logger.info(
            "scrape_job_rejected",
            user_id=str(current_user.id),
            reason=str(exc),
            required=exc.required,
            remaining=exc.available,
        )
        return _error(status.HTTP_403_FORBIDDEN, str(exc), remaining=exc.available)
    except SubscriptionError as exc:
        logger.info(
            "scrape_job_rejected",
            user_id=str(current_user.id),
            reason=str(exc),
        )
        return _error(status.HTTP_403_FORBIDDEN, str(exc))

    max_records = get_settings().max_records_per_job
    if payload.records > max_records:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"records must not exceed {max_records}.",
        )

    request = payload.to_request()
    job = ScrapeJob(
        user_id=current_user.id,
        start_point=request.start_id,
        records=request.count,
        carriers=request.want_carriers,
        brokers=request.want_brokers,
        authorized=request.want_authorized,
        standard=request.want_standard,
        status="processing",
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)

    # Dispatch Celery task
    from fmcsa_registry.scraper.tasks import run_scrape_job_task  # noqa: PLC0415

    try:
        run_scrape_job_task.apply_async(
            kwargs={"job_id": str(job.id)},
            queue="scraping",
        )
    except Exception as exc:
        job.status = "failed"
        job.error_message = f"could not enqueue job: {exc}"
        await db.commit()
        logger.error("scrape_job_enqueue_failed", job_id=str(job.id), error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Job queue unavailable.",
        ) from exc

    logger.info(
        "scrape_job_created",
        job_id=str(job.id),
        start_point=job.start_point,
        records=job.records,
        user_id=str(current_user.id),
    )
    return ScrapeJobAccepted(job_id=job.id, status=job.status)


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[ScrapeJobSummary])
async def list_scrape_jobs(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_active_user)],
    pagination: Annotated[PaginationParams, Depends(get_pagination)],
    status_filter: Optional[str] = None,
) -> list[ScrapeJob]:
    """List the current user's scrape jobs, newest first.

    Args:
        pagination: ``cursor`` is the ``created_at`` of the last job on the
            previous page; ``page_size`` defaults to 10.
        status_filter: Optional filter on job status.
    """
    stmt = (
        select(ScrapeJob)
        .where(ScrapeJob.user_id == current_user.id)
        .order_by(ScrapeJob.created_at.desc())
        .limit(pagination.page_size)
    )

    if status_filter is not None:
        stmt = stmt.where(ScrapeJob.status == status_filter)

    if pagination.cursor:
        try:
            cursor_ts = datetime.fromisoformat(pagination.cursor)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="cursor must be an ISO 8601 timestamp.",
            ) from exc
        stmt = stmt.where(ScrapeJob.created_at < cursor_ts)

    result = await db.execute(stmt)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Detail
# ---------------------------------------------------------------------------


@router.get("/{job_id}", response_model=ScrapeJobRead)
async def get_scrape_job(
    job_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> ScrapeJob:
    """Retrieve a scrape job with its status and stored records.

    Raises:
        HTTPException 404: If the job does not exist.
        HTTPException 403: If the caller did not create the job (and is not admin).
    """
    job = await _get_job_or_404(job_id, db)
    ownership_guard(job.user_id, current_user)
    return job


# ---------------------------------------------------------------------------
# CSV download
# ---------------------------------------------------------------------------


@router.get("/{job_id}/download", response_class=Response)
async def download_scrape_job(
    job_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> Response:
    """Download a completed job's records as CSV.

    Every value is double-quoted with embedded quotes doubled.  The file is
    named ``fmcsa_{start}_{start+records}.csv``.

    Raises:
        HTTPException 404: If the job does not exist.
        HTTPException 403: If the caller did not create the job (and is not admin).
        HTTPException 409: If the job has not completed.
    """
    job = await _get_job_or_404(job_id, db)
    ownership_guard(job.user_id, current_user)

    if job.status != "completed":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Job is '{job.status}'; only completed jobs can be downloaded.",
        )

    filename = csv_filename(job.start_point, job.records)
    logger.info(
        "scrape_job_downloaded",
        job_id=str(job_id),
        records_found=job.records_found,
        user_id=str(current_user.id),
    )
    return Response(
        content=render_csv(job.result_data or []),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
