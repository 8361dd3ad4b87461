"""Subscription gating and record-quota accounting.

Quota model
-----------
Each user row carries ``records_remaining``.  Activating a plan resets it to
the plan's allowance; every successful scrape job charges the size of its
requested range, not the number of matching records.

  1. Acceptance:  ensure_can_scrape() rejects a request before any job row
                  exists (no subscription, expired, or not enough records).
  2. Settlement:  consume_records_sync() decrements the counter in the same
                  transaction that marks the job completed.
  3. Failure:     nothing is charged.

The decrement is a single ``UPDATE ... SET records_remaining =
GREATEST(records_remaining - :amount, 0)`` so concurrent jobs settling for
the same user cannot overwrite each other's charge.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from fmcsa_registry.config.plans import PlanTier, SubscriptionStatus, get_plan
from fmcsa_registry.core.database import get_db
from fmcsa_registry.core.exceptions import (
    InsufficientQuotaError,
    SubscriptionExpiredError,
    SubscriptionInactiveError,
)
from fmcsa_registry.core.models.users import User

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# QuotaService
# ---------------------------------------------------------------------------


class QuotaService:
    """Reads and changes a user's subscription and remaining record quota.

    Write methods commit immediately.

    Args:
        session: An open :class:`sqlalchemy.ext.asyncio.AsyncSession`.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    @staticmethod
    def ensure_can_scrape(
        user: Optional[User],
        records: int,
        *,
        now: Optional[datetime] = None,
    ) -> None:
        """Raise unless *user* may start a job of *records* lookups.

        Checks run in a fixed order and the first failure wins: missing
        user or inactive subscription (``active`` and ``trial`` both pass),
        then an end date in the past, then the remaining quota.

        Raises:
            SubscriptionInactiveError: No user row, or status is
                ``"inactive"``.
            SubscriptionExpiredError: ``subscription_end_date`` has passed.
            InsufficientQuotaError: ``records_remaining < records``.
        """
        if user is None or user.subscription_status == SubscriptionStatus.INACTIVE.value:
            raise SubscriptionInactiveError()

        end_date = user.subscription_end_date
        if end_date is not None and end_date < (now or _now()):
            raise SubscriptionExpiredError()

        if user.records_remaining < records:
            logger.warning(
                "Insufficient records for scrape job",
                extra={
                    "user_id": str(user.id),
                    "required": records,
                    "available": user.records_remaining,
                },
            )
            raise InsufficientQuotaError(
                required=records,
                available=user.records_remaining,
                user_id=str(user.id),
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_user(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def get_remaining(self, user_id: uuid.UUID) -> int:
        """Return the user's ``records_remaining`` (0 for unknown users)."""
        user = await self.get_user(user_id)
        return user.records_remaining if user is not None else 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def grant_plan(
        self,
        user_id: uuid.UUID,
        tier: PlanTier | str,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[User]:
        """Activate *tier* for a user and reset their quota.

        Sets status ``"active"``, the tier, an end date one plan period from
        *now*, and ``records_remaining`` to the plan allowance.

        Returns:
            The updated user, or ``None`` if no such user exists.
        """
        plan = get_plan(tier)
        user = await self.get_user(user_id)
        if user is None:
            return None

        start = now or _now()
        user.subscription_status = SubscriptionStatus.ACTIVE.value
        user.subscription_tier = plan.tier.value
        user.subscription_end_date = start + timedelta(days=plan.period_days)
        user.records_remaining = plan.records
        await self.session.commit()
        await self.session.refresh(user)

        logger.info(
            "Subscription plan granted",
            extra={
                "user_id": str(user_id),
                "tier": plan.tier.value,
                "records": plan.records,
            },
        )
        return user


# ---------------------------------------------------------------------------
# Settlement (synchronous, Celery side)
# ---------------------------------------------------------------------------


def consume_records_sync(session: Session, user_id: uuid.UUID | str, amount: int) -> None:
    """Charge *amount* records to a user inside the caller's transaction.

    The caller commits.  The counter never drops below zero.
    """
    session.execute(
        text(
            """
            UPDATE users
            SET records_remaining = GREATEST(records_remaining - :amount, 0),
                updated_at = NOW()
            WHERE id = :user_id
            """
        ),
        {"amount": amount, "user_id": str(user_id)},
    )


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------


async def get_quota_service(
    session: AsyncSession = Depends(get_db),
) -> QuotaService:
    """FastAPI dependency returning a :class:`QuotaService` bound to the
    current request's database session."""
    return QuotaService(session)
