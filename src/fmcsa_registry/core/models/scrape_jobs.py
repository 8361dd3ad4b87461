"""SQLAlchemy ORM model for scrape jobs."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fmcsa_registry.core.models.base import Base

if TYPE_CHECKING:
    from fmcsa_registry.core.models.users import User


class ScrapeJob(Base):
    """One request to scrape an MC-number range.

    Attributes:
        id: UUID primary key.
        user_id: Owner of the job.
        start_point: First MC number of the range.
        records: Number of identifiers requested (also the quota charge).
        carriers: Keep carrier entities.
        brokers: Keep broker entities.
        authorized: Keep entities with an authorized operating status.
        standard: Disable status filtering.
        status: Lifecycle state: ``"pending"``, ``"processing"``,
            ``"completed"`` or ``"failed"``.
        result_data: Serialised matching records once completed.
        records_found: ``len(result_data)`` once completed.
        celery_task_id: ID of the Celery task running this job.
        error_message: Human-readable error description if the job failed.
        created_at: Timestamp when the job was created.
        started_at: Timestamp when the Celery task started executing.
        completed_at: Timestamp when the job reached a terminal state.
    """

    __tablename__ = "scrape_jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Request
    start_point: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    records: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    carriers: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.text("false"),
    )
    brokers: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.text("false"),
    )
    authorized: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.text("false"),
    )
    standard: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.text("false"),
    )

    # Lifecycle
    status: Mapped[str] = mapped_column(
        sa.String(20),
        nullable=False,
        server_default=sa.text("'pending'"),
    )
    result_data: Mapped[Optional[list]] = mapped_column(
        JSONB,
        nullable=True,
    )
    records_found: Mapped[Optional[int]] = mapped_column(
        sa.Integer,
        nullable=True,
    )
    celery_task_id: Mapped[Optional[str]] = mapped_column(
        sa.String(255),
        nullable=True,
    )
    error_message: Mapped[Optional[str]] = mapped_column(
        sa.Text,
        nullable=True,
    )

    # Timing
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )
    started_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )

    user: Mapped[User] = relationship("User", back_populates="scrape_jobs")

    __table_args__ = (
        sa.Index("idx_scrape_jobs_user_created", "user_id", "created_at"),
        sa.Index("idx_scrape_jobs_status", "status"),
        sa.CheckConstraint("start_point >= 0", name="ck_scrape_jobs_start_point"),
        sa.CheckConstraint("records >= 0", name="ck_scrape_jobs_records"),
    )
