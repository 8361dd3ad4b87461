"""SQLAlchemy ORM models for the FMCSA registry scraper.

All models are imported here so that Alembic sees them on ``Base.metadata``
and relationship targets resolve at import time.
"""

from __future__ import annotations

from fmcsa_registry.core.models.base import Base
from fmcsa_registry.core.models.scrape_jobs import ScrapeJob
from fmcsa_registry.core.models.users import User

__all__ = [
    "Base",
    "ScrapeJob",
    "User",
]
