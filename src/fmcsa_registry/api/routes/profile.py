"""Subscription profile and plan catalogue routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from fmcsa_registry.api.dependencies import get_current_active_user
from fmcsa_registry.config.plans import PLANS
from fmcsa_registry.core.models.users import User
from fmcsa_registry.core.schemas.profile import PlanRead, ProfileRead

router = APIRouter()


@router.get("/profile/me", response_model=ProfileRead, tags=["profile"])
async def get_my_profile(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Return the caller's subscription status, tier, end date and quota."""
    return current_user


@router.get("/plans", response_model=list[PlanRead], tags=["profile"])
async def list_plans() -> list[PlanRead]:
    """Return the subscription plan catalogue, cheapest first."""
    return [
        PlanRead(
            tier=plan.tier,
            price_usd=plan.price_usd,
            records=plan.records,
            period_days=plan.period_days,
            features=list(plan.features),
        )
        for plan in sorted(PLANS.values(), key=lambda p: p.price_usd)
    ]
