"""Pydantic request/response schemas for scrape jobs.

Used by the scrape job API routes for validation, serialisation, and
OpenAPI documentation generation.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from fmcsa_registry.scraper.filters import ScrapeRequest


class ScrapeJobCreate(BaseModel):
    """Payload for creating a new scrape job.

    Attributes:
        start_point: First MC number to query.
        records: Number of sequential MC numbers to query; this is also the
            number of records charged against the user's quota.
        carriers: Keep carrier entities.
        brokers: Keep broker entities.
        authorized: Keep authorized entities (or only unauthorized ones
            when ``False`` and ``standard`` is ``False``).
        standard: Disable operating-status filtering.
    """

    start_point: int = Field(ge=0)
    records: int = Field(ge=0)
    carriers: bool = False
    brokers: bool = False
    authorized: bool = False
    standard: bool = False

    def to_request(self) -> ScrapeRequest:
        return ScrapeRequest(
            start_id=self.start_point,
            count=self.records,
            want_carriers=self.carriers,
            want_brokers=self.brokers,
            want_authorized=self.authorized,
            want_standard=self.standard,
        )


class ScrapeJobAccepted(BaseModel):
    """Immediate response to a job submission."""

    job_id: uuid.UUID
    status: str


class ScrapeJobSummary(BaseModel):
    """Job row without the stored records, for list views."""

    id: uuid.UUID
    user_id: uuid.UUID
    start_point: int
    records: int
    carriers: bool
    brokers: bool
    authorized: bool
    standard: bool

    status: str
    records_found: Optional[int]
    error_message: Optional[str]

    created_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)


class ScrapeJobRead(ScrapeJobSummary):
    """Full representation of a persisted scrape job, results included."""

    celery_task_id: Optional[str]
    result_data: Optional[List[dict[str, Any]]]
