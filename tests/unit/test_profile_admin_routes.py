"""Unit tests for the profile, plan catalogue and admin subscription routes,
plus the auth and pagination dependencies they rely on.

Route functions are called directly; no database or HTTP server is needed.
"""

from __future__ import annotations

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException

from fmcsa_registry.api.dependencies import (
    get_pagination,
    is_admin,
    ownership_guard,
    require_admin,
)
from fmcsa_registry.api.routes.admin import grant_subscription
from fmcsa_registry.api.routes.profile import get_my_profile, list_plans
from fmcsa_registry.config.plans import PlanTier
from fmcsa_registry.core.models.users import User
from fmcsa_registry.core.schemas.profile import ProfileRead, SubscriptionGrant
from tests.factories import AdminUserFactory, InactiveSubscriberFactory, UserFactory


# ---------------------------------------------------------------------------
# Profile and plans
# ---------------------------------------------------------------------------


class TestProfileRoutes:
    async def test_profile_reflects_subscription_fields(self) -> None:
        user = User(**UserFactory.build(records_remaining=777))

        result = await get_my_profile(current_user=user)
        profile = ProfileRead.model_validate(result)

        assert profile.id == user.id
        assert profile.subscription_status == "active"
        assert profile.subscription_tier == "basic"
        assert profile.records_remaining == 777

    async def test_new_account_profile(self) -> None:
        user = User(**InactiveSubscriberFactory.build())
        profile = ProfileRead.model_validate(await get_my_profile(current_user=user))
        assert profile.subscription_status == "inactive"
        assert profile.subscription_tier is None
        assert profile.records_remaining == 0

    async def test_plans_sorted_by_price(self) -> None:
        plans = await list_plans()
        assert [p.tier for p in plans] == [
            PlanTier.BASIC,
            PlanTier.PRO,
            PlanTier.ENTERPRISE,
        ]
        assert [p.price_usd for p in plans] == sorted(p.price_usd for p in plans)
        assert all(p.features for p in plans)


# ---------------------------------------------------------------------------
# Admin subscription grant
# ---------------------------------------------------------------------------


class TestGrantSubscription:
    async def test_grants_plan_through_quota_service(self) -> None:
        admin = User(**AdminUserFactory.build())
        target = User(**UserFactory.build())
        quota_svc = MagicMock()
        quota_svc.grant_plan = AsyncMock(return_value=target)

        result = await grant_subscription(
            user_id=target.id,
            payload=SubscriptionGrant(tier=PlanTier.PRO),
            admin=admin,
            quota_svc=quota_svc,
        )

        assert result is target
        quota_svc.grant_plan.assert_awaited_once_with(target.id, PlanTier.PRO)

    async def test_unknown_user_is_404(self) -> None:
        admin = User(**AdminUserFactory.build())
        quota_svc = MagicMock()
        quota_svc.grant_plan = AsyncMock(return_value=None)

        with pytest.raises(HTTPException) as exc_info:
            await grant_subscription(
                user_id=uuid.uuid4(),
                payload=SubscriptionGrant(tier=PlanTier.BASIC),
                admin=admin,
                quota_svc=quota_svc,
            )
        assert exc_info.value.status_code == 404

    def test_grant_payload_rejects_unknown_tier(self) -> None:
        with pytest.raises(ValueError):
            SubscriptionGrant(tier="platinum")


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


class TestRequireAdmin:
    async def test_admin_role_passes(self) -> None:
        admin = User(**AdminUserFactory.build(is_superuser=False))
        assert await require_admin(user=admin) is admin

    async def test_superuser_passes(self) -> None:
        user = User(**UserFactory.build(is_superuser=True))
        assert await require_admin(user=user) is user

    async def test_regular_user_is_403(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(user=User(**UserFactory.build()))
        assert exc_info.value.status_code == 403

    def test_is_admin(self) -> None:
        assert is_admin(User(**AdminUserFactory.build()))
        assert not is_admin(User(**UserFactory.build()))


class TestOwnershipGuard:
    def test_owner_passes(self) -> None:
        user = User(**UserFactory.build())
        ownership_guard(user.id, user)

    def test_stranger_is_403(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            ownership_guard(uuid.uuid4(), User(**UserFactory.build()))
        assert exc_info.value.status_code == 403


class TestGetPagination:
    def test_defaults(self) -> None:
        params = get_pagination()
        assert params.cursor is None
        assert params.page_size == 10

    @pytest.mark.parametrize("page_size", [0, 201])
    def test_out_of_range_is_422(self, page_size: int) -> None:
        with pytest.raises(HTTPException) as exc_info:
            get_pagination(page_size=page_size)
        assert exc_info.value.status_code == 422
