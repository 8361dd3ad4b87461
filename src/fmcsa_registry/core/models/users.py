"""User ORM model: identity, FastAPI-Users flags and subscription state.

The subscription columns carry what the acceptance checks on
``POST /scrape-jobs/`` read: ``subscription_status``,
``subscription_end_date`` and ``records_remaining``.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fmcsa_registry.core.models.base import Base

if TYPE_CHECKING:
    from fmcsa_registry.core.models.scrape_jobs import ScrapeJob


class User(Base):
    """An account that can buy a subscription and run scrape jobs.

    ``is_active`` gates login; ``subscription_status`` gates scraping.  New
    registrations are active with an inactive subscription and zero quota
    until an admin grants a plan.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )
    email: Mapped[str] = mapped_column(
        sa.String(320),
        unique=True,
        nullable=False,
        index=True,
    )
    hashed_password: Mapped[str] = mapped_column(
        sa.String(1024),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.text("true"),
    )
    is_superuser: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.text("false"),
    )
    is_verified: Mapped[bool] = mapped_column(
        sa.Boolean,
        nullable=False,
        server_default=sa.text("false"),
    )
    role: Mapped[str] = mapped_column(
        sa.String(20),
        nullable=False,
        server_default=sa.text("'user'"),
    )

    # Subscription
    subscription_status: Mapped[str] = mapped_column(
        sa.String(20),
        nullable=False,
        server_default=sa.text("'inactive'"),
    )
    subscription_tier: Mapped[Optional[str]] = mapped_column(
        sa.String(20),
        nullable=True,
    )
    subscription_end_date: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )
    records_remaining: Mapped[int] = mapped_column(
        sa.Integer,
        nullable=False,
        server_default=sa.text("0"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=sa.text("NOW()"),
        onupdate=sa.text("NOW()"),
    )

    scrape_jobs: Mapped[list[ScrapeJob]] = relationship(
        "ScrapeJob",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        sa.CheckConstraint(
            "subscription_status IN ('active', 'inactive', 'trial')",
            name="ck_users_subscription_status",
        ),
        sa.CheckConstraint(
            "records_remaining >= 0",
            name="ck_users_records_remaining_non_negative",
        ),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
