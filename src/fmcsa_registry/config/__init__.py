"""Configuration package for the FMCSA registry scraper.

Re-exports the most commonly used configuration symbols so that
callers can write::

    from fmcsa_registry.config import get_settings, PLANS

without needing to know which sub-module each symbol lives in.
"""

from __future__ import annotations

from fmcsa_registry.config.plans import (
    PLANS,
    Plan,
    PlanTier,
    SubscriptionStatus,
    get_plan,
)
from fmcsa_registry.config.settings import Settings, get_settings

__all__ = [
    # settings
    "Settings",
    "get_settings",
    # plans
    "Plan",
    "PlanTier",
    "PLANS",
    "SubscriptionStatus",
    "get_plan",
]
