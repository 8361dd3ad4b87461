"""Admin subscription management routes.

Routes:
    POST /admin/users/{user_id}/subscription — activate a plan for a user
"""

from __future__ import annotations

import uuid
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from fmcsa_registry.api.dependencies import require_admin
from fmcsa_registry.core.models.users import User
from fmcsa_registry.core.quota_service import QuotaService, get_quota_service
from fmcsa_registry.core.schemas.profile import ProfileRead, SubscriptionGrant

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/{user_id}/subscription", response_model=ProfileRead)
async def grant_subscription(
    user_id: uuid.UUID,
    payload: SubscriptionGrant,
    admin: Annotated[User, Depends(require_admin)],
    quota_svc: Annotated[QuotaService, Depends(get_quota_service)],
) -> User:
    """Activate a plan: status ``active``, tier set, end date one period
    ahead, and ``records_remaining`` reset to the plan allowance.

    Raises:
        HTTPException 404: If the user does not exist.
    """
    user = await quota_svc.grant_plan(user_id, payload.tier)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found.",
        )

    logger.info(
        "subscription_granted",
        user_id=str(user_id),
        tier=payload.tier.value,
        admin_id=str(admin.id),
    )
    return user
