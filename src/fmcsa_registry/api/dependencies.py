"""FastAPI dependency injection providers.

Provides reusable dependencies for authentication, authorisation and
pagination.  All auth dependencies delegate to FastAPI-Users via the
``fastapi_users`` instance defined in ``api/routes/auth.py``.

Dependency hierarchy::

    get_optional_user         — returns None if unauthenticated
    get_current_active_user   — requires a valid bearer JWT and is_active=True
    require_admin             — additionally requires an admin account

Note on import order:
    This module imports from ``api.routes.auth`` at the function level to
    avoid a circular import.  The chain is ``auth.py`` → ``user_manager.py``
    → ``database.py``, with no back-edge to ``dependencies.py``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status

from fmcsa_registry.core.models.users import User


# ---------------------------------------------------------------------------
# Internal helpers that resolve the FastAPIUsers instance at call time
# ---------------------------------------------------------------------------


def _current_user_dep(*, active: bool, optional: bool):  # type: ignore[return]
    """Return a FastAPI-Users ``current_user`` callable dependency.

    Args:
        active: If ``True``, reject inactive users.
        optional: If ``True``, return ``None`` instead of raising 401.
    """
    from fmcsa_registry.api.routes.auth import fastapi_users  # noqa: PLC0415

    return fastapi_users.current_user(active=active, optional=optional)


# ---------------------------------------------------------------------------
# Core auth dependencies
# ---------------------------------------------------------------------------


async def get_current_active_user(
    user: Annotated[User, Depends(_current_user_dep(active=True, optional=False))],
) -> User:
    """Require a valid JWT and ``is_active=True``.

    Raises:
        HTTPException 401: If no valid JWT is present or the account is
            inactive.
    """
    return user


async def get_optional_user(
    user: Annotated[
        Optional[User],
        Depends(_current_user_dep(active=True, optional=True)),
    ],
) -> Optional[User]:
    """Return the current active user, or ``None`` if unauthenticated.

    Used where the route itself shapes the unauthenticated response.
    """
    return user


def is_admin(user: User) -> bool:
    return bool(user.is_superuser) or user.role == "admin"


async def require_admin(
    user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    """Require an active admin account.

    Guards subscription management endpoints.

    Raises:
        HTTPException 403: If the user is neither superuser nor ``role='admin'``.
    """
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required.",
        )
    return user


# ---------------------------------------------------------------------------
# Ownership guard
# ---------------------------------------------------------------------------


def ownership_guard(resource_owner_id: uuid.UUID, current_user: User) -> None:
    """Raise HTTP 403 if ``current_user`` is neither the owner nor an admin.

    Example usage::

        job = await _get_job_or_404(job_id, db)
        ownership_guard(job.user_id, current_user)

    Raises:
        HTTPException 403: If ``current_user.id != resource_owner_id``
            and the user is not an admin.
    """
    if is_admin(current_user):
        return
    if current_user.id != resource_owner_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to access this resource.",
        )


# ---------------------------------------------------------------------------
# Pagination parameters
# ---------------------------------------------------------------------------


@dataclass
class PaginationParams:
    """Cursor-pagination parameters shared across list endpoints.

    Attributes:
        cursor: ISO 8601 ``created_at`` of the last item on the previous
            page.
        page_size: Number of records to return per page (1–200).
    """

    cursor: Optional[str]
    page_size: int


def get_pagination(
    cursor: Optional[str] = None,
    page_size: int = 10,
) -> PaginationParams:
    """Parse and validate cursor-pagination query parameters.

    Raises:
        HTTPException 422: If ``page_size`` is outside the range 1–200.
    """
    if not 1 <= page_size <= 200:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="page_size must be between 1 and 200.",
        )
    return PaginationParams(cursor=cursor, page_size=page_size)
