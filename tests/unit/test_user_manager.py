"""Unit tests for the FastAPI-Users adapter and manager hooks."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fmcsa_registry.config.settings import get_settings
from fmcsa_registry.core.models.users import User
from fmcsa_registry.core.user_manager import (
    RegistryUserDatabase,
    UserCreate,
    UserManager,
    UserRead,
)
from tests.factories import UserFactory


def _mock_session() -> MagicMock:
    session = MagicMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    return session


class TestRegistryUserDatabase:
    async def test_new_account_starts_without_subscription(self) -> None:
        session = _mock_session()
        user_db = RegistryUserDatabase(session, User)

        user = await user_db.create(
            {
                "email": "new@example.com",
                "hashed_password": "x",
                "subscription_status": "active",
                "records_remaining": 10**6,
            }
        )

        assert user.subscription_status == "inactive"
        assert user.subscription_tier is None
        assert user.subscription_end_date is None
        assert user.records_remaining == 0
        session.add.assert_called_once_with(user)
        session.commit.assert_awaited_once()


class TestUserSchemas:
    def test_create_schema_ignores_subscription_fields(self) -> None:
        payload = UserCreate(
            email="a@example.com", password="pw-123456", records_remaining=99
        )
        assert "records_remaining" not in payload.create_update_dict()

    def test_read_schema_exposes_quota(self) -> None:
        user = User(**UserFactory.build(records_remaining=12))
        read = UserRead.model_validate(user, from_attributes=True)
        assert read.records_remaining == 12
        assert read.role == "user"


class TestUserManager:
    def test_token_secrets_come_from_settings(self) -> None:
        manager = UserManager(MagicMock())
        assert manager.reset_password_token_secret == get_settings().secret_key
        assert manager.verification_token_secret == get_settings().secret_key
