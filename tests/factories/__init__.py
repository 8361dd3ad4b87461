"""Factory Boy factories for test data generation.

Available factories
-------------------
UserFactory                 — user dict with an active basic subscription
InactiveSubscriberFactory   — user dict with no subscription
AdminUserFactory            — admin user dict
CarrierRecordFactory        — CarrierRecord instance
ScrapeJobFactory            — scrape job dict
"""

from __future__ import annotations

from tests.factories.records import CarrierRecordFactory, ScrapeJobFactory
from tests.factories.users import (
    AdminUserFactory,
    InactiveSubscriberFactory,
    UserFactory,
)

__all__ = [
    "AdminUserFactory",
    "CarrierRecordFactory",
    "InactiveSubscriberFactory",
    "ScrapeJobFactory",
    "UserFactory",
]
