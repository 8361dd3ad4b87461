"""Async HTTP fetcher for SAFER company-snapshot pages.

Uses ``httpx`` for all HTTP requests.  A fetch never raises for network or
HTTP-level problems: every failure is folded into a :class:`FetchResult`
with ``html=None`` so the worker can treat it exactly like "no record".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from fmcsa_registry.scraper.config import DEFAULT_TIMEOUT, LOOKUP_URL_TEMPLATE, USER_AGENT

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchResult:
    """Result of a single snapshot fetch attempt.

    Attributes:
        mc_number: The identifier that was looked up.
        html: Raw HTML string, or ``None`` if the fetch failed.
        status_code: HTTP status code, or ``None`` on network error.
        error: Human-readable error description, or ``None`` on success.
    """

    mc_number: int
    html: str | None
    status_code: int | None
    error: str | None

    @property
    def ok(self) -> bool:
        """``True`` when the page body is available for extraction."""
        return self.error is None and self.html is not None


def build_lookup_url(mc_number: int, url_template: str = LOOKUP_URL_TEMPLATE) -> str:
    """Render the lookup URL for *mc_number*."""
    return url_template.format(mc_number=mc_number)


# ---------------------------------------------------------------------------
# Public fetch function
# ---------------------------------------------------------------------------


async def fetch_snapshot(
    mc_number: int,
    *,
    client: httpx.AsyncClient,
    url_template: str = LOOKUP_URL_TEMPLATE,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = USER_AGENT,
) -> FetchResult:
    """Fetch the company-snapshot page for one MC number.

    Sends a single ``GET`` with a browser-like user-agent.  No retry is
    attempted at this layer.

    Args:
        mc_number: Identifier to look up.
        client: Shared :class:`httpx.AsyncClient` instance.
        url_template: Lookup URL with a ``{mc_number}`` placeholder.
        timeout: Request timeout in seconds.
        user_agent: Value of the ``User-Agent`` header.

    Returns:
        A :class:`FetchResult`.  ``result.ok`` is ``False`` on timeout,
        transport error, non-2xx status, or an undecodable body.
    """
    url = build_lookup_url(mc_number, url_template)

    try:
        response = await client.get(
            url,
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
        )
    except httpx.TimeoutException:
        logger.warning("scraper: timeout fetching MC %d", mc_number)
        return FetchResult(mc_number=mc_number, html=None, status_code=None, error="timeout")
    except httpx.RequestError as exc:
        logger.warning("scraper: request error for MC %d: %s", mc_number, exc)
        return FetchResult(
            mc_number=mc_number,
            html=None,
            status_code=None,
            error=f"request error: {exc}",
        )

    if not response.is_success:
        logger.info("scraper: HTTP %d for MC %d", response.status_code, mc_number)
        return FetchResult(
            mc_number=mc_number,
            html=None,
            status_code=response.status_code,
            error=f"HTTP {response.status_code}",
        )

    try:
        html = response.text
    except (UnicodeDecodeError, LookupError) as exc:
        logger.warning("scraper: decode error for MC %d: %s", mc_number, exc)
        return FetchResult(
            mc_number=mc_number,
            html=None,
            status_code=response.status_code,
            error=f"decode error: {exc}",
        )

    return FetchResult(
        mc_number=mc_number,
        html=html,
        status_code=response.status_code,
        error=None,
    )
