"""Application-wide exception hierarchy for the FMCSA registry scraper.

All custom exceptions subclass ``FmcsaRegistryError``, enabling
consistent error handling and structured logging across the application.

Hierarchy::

    FmcsaRegistryError
    ├── SubscriptionError
    │   ├── SubscriptionInactiveError
    │   └── SubscriptionExpiredError
    ├── QuotaError
    │   └── InsufficientQuotaError   (required, available)
    ├── ScrapeJobError               (job_id)
    └── ExtractionError              (label)
"""

from __future__ import annotations


class FmcsaRegistryError(Exception):
    """Base class for all FMCSA registry scraper exceptions.

    All application-specific exceptions inherit from this class so that
    callers can catch the entire hierarchy with a single ``except`` clause
    when needed.
    """


# ---------------------------------------------------------------------------
# Subscription exceptions
# ---------------------------------------------------------------------------


class SubscriptionError(FmcsaRegistryError):
    """Base class for subscription-state rejections.

    The message is shown to the user verbatim, so keep it short.
    """


class SubscriptionInactiveError(SubscriptionError):
    """Raised when a user has no profile or an inactive subscription."""

    def __init__(self, message: str = "No active subscription") -> None:
        super().__init__(message)


class SubscriptionExpiredError(SubscriptionError):
    """Raised when a user's subscription end date lies in the past."""

    def __init__(self, message: str = "Subscription expired") -> None:
        super().__init__(message)


# ---------------------------------------------------------------------------
# Quota exceptions
# ---------------------------------------------------------------------------


class QuotaError(FmcsaRegistryError):
    """Base class for quota-system errors."""


class InsufficientQuotaError(QuotaError):
    """Raised when a user asks to scan more records than they have left.

    Args:
        required: Number of records requested.
        available: Number of records the user currently has remaining.
        user_id: UUID string of the user (for logging).
    """

    def __init__(
        self,
        required: int,
        available: int,
        user_id: str | None = None,
    ) -> None:
        super().__init__("Insufficient records remaining")
        self.required = required
        self.available = available
        self.user_id = user_id


# ---------------------------------------------------------------------------
# Scraping exceptions
# ---------------------------------------------------------------------------


class ScrapeJobError(FmcsaRegistryError):
    """Raised when a scrape job fails as a whole.

    Per-identifier problems never raise this; it signals a fault outside
    the per-identifier boundary (missing job row, orchestration failure).

    Args:
        message: Description of the failure.
        job_id: UUID string of the affected scrape job.
    """

    def __init__(self, message: str, job_id: str | None = None) -> None:
        super().__init__(message)
        self.job_id = job_id


class ExtractionError(FmcsaRegistryError):
    """Raised by a field locator when markup cannot be queried.

    The record extractor catches this per field and records an empty value.

    Args:
        message: Description of the failure.
        label: The field label that was being located.
    """

    def __init__(self, message: str, label: str | None = None) -> None:
        super().__init__(message)
        self.label = label
