"""FastAPI-Users integration: UserManager, Pydantic schemas, and database adapter.

The ``users`` table carries the ``is_active`` / ``is_superuser`` /
``is_verified`` columns FastAPI-Users expects, so the stock
``SQLAlchemyUserDatabase`` adapter is used with one override: a new
registration always starts with an inactive subscription and no quota,
whatever the client sent.

Exports:
    UserRead, UserCreate, UserUpdate: Pydantic schemas for FastAPI-Users.
    UserManager: The FastAPI-Users manager class.
    RegistryUserDatabase: SQLAlchemy adapter for the ``User`` model.
    get_user_db: FastAPI dependency yielding RegistryUserDatabase.
    get_user_manager: FastAPI dependency yielding UserManager.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any, Optional

import structlog
from fastapi import Depends, Request
from fastapi_users import BaseUserManager, UUIDIDMixin, schemas
from fastapi_users.db import SQLAlchemyUserDatabase
from sqlalchemy.ext.asyncio import AsyncSession

from fmcsa_registry.config.plans import SubscriptionStatus
from fmcsa_registry.config.settings import get_settings
from fmcsa_registry.core.database import get_db
from fmcsa_registry.core.models.users import User

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Pydantic schemas (FastAPI-Users contract)
# ---------------------------------------------------------------------------


class UserRead(schemas.BaseUser[uuid.UUID]):
    """Public user representation returned by ``/users/me``."""

    role: str
    subscription_status: str
    subscription_tier: Optional[str] = None
    subscription_end_date: Optional[datetime] = None
    records_remaining: int


class UserCreate(schemas.BaseUserCreate):
    """Schema for new user registration.

    Subscription fields cannot be set here; they change only through the
    admin subscription endpoint.
    """


class UserUpdate(schemas.BaseUserUpdate):
    """Schema for self-service updates (email and password)."""


# ---------------------------------------------------------------------------
# SQLAlchemy user database adapter
# ---------------------------------------------------------------------------


class RegistryUserDatabase(SQLAlchemyUserDatabase):
    """``SQLAlchemyUserDatabase`` that pins subscription state on create."""

    async def create(self, create_dict: dict[str, Any]) -> User:  # type: ignore[override]
        create_dict["subscription_status"] = SubscriptionStatus.INACTIVE.value
        create_dict["subscription_tier"] = None
        create_dict["subscription_end_date"] = None
        create_dict["records_remaining"] = 0
        return await super().create(create_dict)


# ---------------------------------------------------------------------------
# UserManager
# ---------------------------------------------------------------------------


class UserManager(UUIDIDMixin, BaseUserManager[User, uuid.UUID]):
    """FastAPI-Users UserManager with logging lifecycle hooks.

    Uses ``secret_key`` from application settings for both password-reset
    and verification token signing.
    """

    @property
    def reset_password_token_secret(self) -> str:
        return get_settings().secret_key

    @property
    def verification_token_secret(self) -> str:
        return get_settings().secret_key

    async def on_after_register(
        self, user: User, request: Optional[Request] = None
    ) -> None:
        logger.info(
            "new_user_registered",
            user_id=str(user.id),
            email=user.email,
            note="subscription inactive until a plan is granted",
        )

    async def on_after_forgot_password(
        self, user: User, token: str, request: Optional[Request] = None
    ) -> None:
        """Log password-reset token generation.

        No mail backend is wired in; the token itself is never logged.
        """
        logger.info(
            "password_reset_requested",
            user_id=str(user.id),
            email=user.email,
        )


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------


async def get_user_db(
    session: AsyncSession = Depends(get_db),
) -> AsyncGenerator[RegistryUserDatabase, None]:
    yield RegistryUserDatabase(session, User)


async def get_user_manager(
    user_db: RegistryUserDatabase = Depends(get_user_db),
) -> AsyncGenerator[UserManager, None]:
    yield UserManager(user_db)
