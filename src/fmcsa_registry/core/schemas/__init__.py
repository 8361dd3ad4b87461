"""Pydantic schemas for request/response validation.

Sub-modules:
    scrape_jobs — ScrapeJobCreate, ScrapeJobAccepted, ScrapeJobSummary, ScrapeJobRead
    profile     — ProfileRead, PlanRead, SubscriptionGrant
"""

from __future__ import annotations
