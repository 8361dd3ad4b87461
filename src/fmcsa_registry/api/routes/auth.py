"""Authentication routes: login, logout, registration, and password reset.

A single FastAPI-Users authentication backend is configured: JWT tokens
carried as ``Authorization: Bearer <token>`` headers.  Login returns the
token in the response body.

Exported names:
    fastapi_users: the ``FastAPIUsers`` instance (used by
        ``api/dependencies.py`` for the ``current_user`` shortcuts).
    bearer_backend: the bearer ``AuthenticationBackend``.
    auth_router: combined APIRouter with all auth sub-routers attached.
    users_router: FastAPI-Users self-service and admin user routes.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter
from fastapi_users import FastAPIUsers
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)

from fmcsa_registry.config.settings import get_settings
from fmcsa_registry.core.models.users import User
from fmcsa_registry.core.user_manager import (
    UserCreate,
    UserRead,
    UserUpdate,
    get_user_manager,
)

bearer_transport = BearerTransport(tokenUrl="/auth/jwt/login")


def get_jwt_strategy() -> JWTStrategy:
    """Build a ``JWTStrategy`` from application settings.

    Not cached, so a settings reload in tests picks up a fresh secret.
    """
    settings = get_settings()
    return JWTStrategy(
        secret=settings.secret_key,
        lifetime_seconds=settings.access_token_expire_minutes * 60,
    )


bearer_backend: AuthenticationBackend = AuthenticationBackend(
    name="jwt",
    transport=bearer_transport,
    get_strategy=get_jwt_strategy,
)

fastapi_users: FastAPIUsers[User, uuid.UUID] = FastAPIUsers(
    get_user_manager,
    [bearer_backend],
)

# ---------------------------------------------------------------------------
# Router assembly
# ---------------------------------------------------------------------------

auth_router = APIRouter()
"""Routes provided (under ``/auth``):

- POST /auth/jwt/login, POST /auth/jwt/logout
- POST /auth/register
- POST /auth/forgot-password, POST /auth/reset-password
"""

auth_router.include_router(
    fastapi_users.get_auth_router(bearer_backend),
    prefix="/jwt",
    tags=["auth:jwt"],
)

# New accounts start with an inactive subscription and no quota.
auth_router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    tags=["auth:register"],
)

auth_router.include_router(
    fastapi_users.get_reset_password_router(),
    tags=["auth:password-reset"],
)

users_router = APIRouter()
"""Routes provided (under ``/users``):

- GET/PATCH /users/me
- GET/PATCH/DELETE /users/{id} (superuser only)
"""

users_router.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    tags=["users"],
)
