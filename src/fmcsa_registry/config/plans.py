"""Subscription plan definitions.

Each plan grants a monthly allowance of records.  Quota is charged by the
size of the requested MC-number range, not by the number of matching
records, so a plan's ``records`` value is the number of lookups a subscriber
may run per period.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlanTier(str, Enum):
    """Subscription tiers offered to customers."""

    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, Enum):
    """Lifecycle state of a user's subscription."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    TRIAL = "trial"


@dataclass(frozen=True)
class Plan:
    """Configuration for a single subscription plan.

    Attributes:
        tier: The :class:`PlanTier` this plan describes.
        price_usd: Monthly price in whole US dollars.
        records: Lookup allowance granted when the plan is activated.
        period_days: Length of one billing period.
        features: Marketing bullet points shown on the plan catalogue.
    """

    tier: PlanTier
    price_usd: int
    records: int
    period_days: int
    features: tuple[str, ...]


PLANS: dict[PlanTier, Plan] = {
    PlanTier.BASIC: Plan(
        tier=PlanTier.BASIC,
        price_usd=49,
        records=1_000,
        period_days=30,
        features=(
            "1,000 records per month",
            "Carrier and broker filters",
            "CSV export",
        ),
    ),
    PlanTier.PRO: Plan(
        tier=PlanTier.PRO,
        price_usd=149,
        records=5_000,
        period_days=30,
        features=(
            "5,000 records per month",
            "Carrier and broker filters",
            "CSV export",
            "Priority processing",
        ),
    ),
    PlanTier.ENTERPRISE: Plan(
        tier=PlanTier.ENTERPRISE,
        price_usd=399,
        records=20_000,
        period_days=30,
        features=(
            "20,000 records per month",
            "Carrier and broker filters",
            "CSV export",
            "Priority processing",
            "Dedicated support",
        ),
    ),
}


def get_plan(tier: PlanTier | str) -> Plan:
    """Return the :class:`Plan` for *tier*.

    Raises:
        ValueError: If *tier* is not a known plan tier.
    """
    return PLANS[PlanTier(tier)]
