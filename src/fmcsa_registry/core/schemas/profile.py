"""Pydantic schemas for profile, plan catalogue and subscription grants."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from fmcsa_registry.config.plans import PlanTier


class ProfileRead(BaseModel):
    """Subscription view of the current user."""

    id: uuid.UUID
    email: str
    subscription_status: str
    subscription_tier: Optional[str]
    subscription_end_date: Optional[datetime]
    records_remaining: int

    model_config = ConfigDict(from_attributes=True)


class PlanRead(BaseModel):
    tier: PlanTier
    price_usd: int
    records: int
    period_days: int
    features: List[str]


class SubscriptionGrant(BaseModel):
    """Admin payload activating a plan for a user."""

    tier: PlanTier
