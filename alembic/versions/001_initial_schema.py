"""Initial schema: users and scrape_jobs.

Creates the FMCSA registry scraper schema in FK-dependency order:

1. users        — identity, auth flags, subscription and record quota
2. scrape_jobs  — one MC-number range request and its results (FK → users)

``gen_random_uuid()`` needs the ``pgcrypto`` extension on PostgreSQL < 13.

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _exec(sql: str) -> None:
    """Execute a raw SQL string via the current Alembic connection."""
    op.execute(sa.text(sql))


def upgrade() -> None:
    """Create both tables, their constraints and indexes."""
    _exec('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # ------------------------------------------------------------------
    # 1. users
    # ------------------------------------------------------------------
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("hashed_password", sa.String(1024), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("is_superuser", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("is_verified", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("subscription_status", sa.String(20), nullable=False, server_default=sa.text("'inactive'")),
        sa.Column("subscription_tier", sa.String(20), nullable=True),
        sa.Column("subscription_end_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("records_remaining", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.CheckConstraint(
            "subscription_status IN ('active', 'inactive', 'trial')",
            name="ck_users_subscription_status",
        ),
        sa.CheckConstraint(
            "records_remaining >= 0",
            name="ck_users_records_remaining_non_negative",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ------------------------------------------------------------------
    # 2. scrape_jobs
    # ------------------------------------------------------------------
    op.create_table(
        "scrape_jobs",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_point", sa.Integer, nullable=False),
        sa.Column("records", sa.Integer, nullable=False),
        sa.Column("carriers", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("brokers", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("authorized", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("standard", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("result_data", JSONB, nullable=True),
        sa.Column("records_found", sa.Integer, nullable=True),
        sa.Column("celery_task_id", sa.String(255), nullable=True),
        sa.Column("error_message", sa.Text, nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("started_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("completed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint("start_point >= 0", name="ck_scrape_jobs_start_point"),
        sa.CheckConstraint("records >= 0", name="ck_scrape_jobs_records"),
    )
    op.create_index("idx_scrape_jobs_user_created", "scrape_jobs", ["user_id", "created_at"])
    op.create_index("idx_scrape_jobs_status", "scrape_jobs", ["status"])


def downgrade() -> None:
    """Drop both tables in reverse dependency order."""
    op.drop_table("scrape_jobs")
    op.drop_table("users")
