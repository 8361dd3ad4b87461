"""Sequential scrape loop over an MC-number range.

:class:`ScrapeWorker` owns no I/O of its own: the fetch coroutine and the
sleep function are injected, which keeps the loop testable without a
network and without real delays.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from fmcsa_registry.scraper.config import DEFAULT_DELAY_MAX, DEFAULT_DELAY_MIN
from fmcsa_registry.scraper.filters import RecordFilter, ScrapeRequest
from fmcsa_registry.scraper.http_fetcher import FetchResult
from fmcsa_registry.scraper.locators import FieldLocator, RegexFieldLocator
from fmcsa_registry.scraper.record_extractor import CarrierRecord, extract_record

logger = logging.getLogger(__name__)

FetchFn = Callable[[int], Awaitable[FetchResult]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class WorkerStats:
    """Counters for the most recent :meth:`ScrapeWorker.run`.

    Attributes:
        visited: Identifiers attempted.
        fetched: Pages that came back with a body.
        failed: Fetch failures plus unexpected per-identifier errors.
        matched: Records kept.
    """

    visited: int = 0
    fetched: int = 0
    failed: int = 0
    matched: int = 0


class ScrapeWorker:
    """Fetch, extract and filter every identifier of a :class:`ScrapeRequest`.

    Args:
        fetch: Coroutine function returning a :class:`FetchResult` for an MC
            number.  Usually :func:`~fmcsa_registry.scraper.http_fetcher.fetch_snapshot`
            bound to a client with :func:`functools.partial`.
        delay_min: Lower bound of the inter-request delay (seconds).
        delay_max: Upper bound of the inter-request delay (seconds).
        locator_cls: Field locator used by the extractor.
        sleep: Awaitable sleep; defaults to :func:`asyncio.sleep`.
    """

    def __init__(
        self,
        fetch: FetchFn,
        *,
        delay_min: float = DEFAULT_DELAY_MIN,
        delay_max: float = DEFAULT_DELAY_MAX,
        locator_cls: type[FieldLocator] = RegexFieldLocator,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if delay_min < 0 or delay_max < delay_min:
            raise ValueError(
                f"invalid delay window: delay_min={delay_min}, delay_max={delay_max}"
            )
        self._fetch = fetch
        self._delay_min = delay_min
        self._delay_max = delay_max
        self._locator_cls = locator_cls
        self._sleep = sleep
        self.stats = WorkerStats()

    async def _process(
        self, mc_number: int, record_filter: RecordFilter
    ) -> CarrierRecord | None:
        result = await self._fetch(mc_number)
        if not result.ok:
            self.stats.failed += 1
            logger.info("scraper: MC %d skipped: %s", mc_number, result.error)
            return None
        self.stats.fetched += 1

        record = extract_record(
            result.html or "",
            mc_number,
            locator_cls=self._locator_cls,
            scraped_at=datetime.now(tz=timezone.utc),
        )
        if record is None:
            logger.debug("scraper: MC %d has no record", mc_number)
            return None

        if not record_filter.matches(record):
            logger.debug(
                "scraper: MC %d filtered out (%s, %s)",
                mc_number,
                record.entity_type,
                record.operating_status,
            )
            return None
        return record

    async def run(self, request: ScrapeRequest) -> list[CarrierRecord]:
        """Scrape ``[start_id, start_id + count)`` and return matching records.

        Records come back in ascending identifier order.  A failure on one
        identifier is logged and skipped; the loop always reaches the end of
        the range.
        """
        self.stats = WorkerStats()
        record_filter = RecordFilter.from_request(request)
        records: list[CarrierRecord] = []
        identifiers = request.identifiers

        for index, mc_number in enumerate(identifiers):
            if index > 0:
                await self._sleep(random.uniform(self._delay_min, self._delay_max))

            self.stats.visited += 1
            try:
                record = await self._process(mc_number, record_filter)
            except Exception as exc:  # noqa: BLE001
                self.stats.failed += 1
                logger.warning("scraper: error processing MC %d: %s", mc_number, exc)
                continue

            if record is not None:
                records.append(record)
                self.stats.matched += 1

        logger.info(
            "scraper: range %d-%d done: visited=%d fetched=%d failed=%d matched=%d",
            request.start_id,
            request.start_id + request.count,
            self.stats.visited,
            self.stats.fetched,
            self.stats.failed,
            self.stats.matched,
        )
        return records
