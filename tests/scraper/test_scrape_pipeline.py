"""End-to-end tests of fetch, extract, filter and CSV over a mocked SAFER site.

The real :func:`fetch_snapshot` runs against respx routes, so these cover
the same path a Celery job takes minus the database.
"""

from __future__ import annotations

import csv
import functools
import io

import httpx
import pytest
import respx

from fmcsa_registry.scraper.csv_export import render_csv
from fmcsa_registry.scraper.filters import ScrapeRequest
from fmcsa_registry.scraper.http_fetcher import fetch_snapshot
from fmcsa_registry.scraper.worker import ScrapeWorker

_TEMPLATE = "https://safer.example.test/query.asp?query_string={mc_number}"


async def _no_sleep(_seconds: float) -> None:
    return None


async def _run(request: ScrapeRequest) -> tuple[list, ScrapeWorker]:
    async with httpx.AsyncClient() as client:
        worker = ScrapeWorker(
            functools.partial(fetch_snapshot, client=client, url_template=_TEMPLATE),
            delay_min=0,
            delay_max=0,
            sleep=_no_sleep,
        )
        records = await worker.run(request)
    return records, worker


@pytest.mark.asyncio
class TestScrapePipeline:
    async def test_single_authorized_carrier(self, make_snapshot) -> None:
        with respx.mock() as mock:
            mock.get(_TEMPLATE.format(mc_number=1001)).mock(
                return_value=httpx.Response(200, text=make_snapshot())
            )
            records, worker = await _run(
                ScrapeRequest(1001, 1, want_carriers=True, want_authorized=True)
            )

        assert len(records) == 1
        assert records[0].mc_number == "1001"
        assert records[0].entity_type == "CARRIER"
        assert worker.stats.matched == 1

    async def test_server_error_is_skipped(self, make_snapshot) -> None:
        with respx.mock() as mock:
            mock.get(_TEMPLATE.format(mc_number=1001)).mock(
                return_value=httpx.Response(200, text=make_snapshot())
            )
            mock.get(_TEMPLATE.format(mc_number=1002)).mock(
                return_value=httpx.Response(500)
            )
            records, worker = await _run(ScrapeRequest(1001, 2, want_authorized=True))

        assert [r.mc_number for r in records] == ["1001"]
        assert worker.stats.failed == 1
        assert worker.stats.visited == 2

    async def test_standard_passes_unauthorized_entities(self, make_snapshot) -> None:
        page = make_snapshot({"Operating Authority Status:": "NOT ACTIVE"})
        with respx.mock() as mock:
            mock.get(_TEMPLATE.format(mc_number=5)).mock(
                return_value=httpx.Response(200, text=page)
            )
            filtered, _ = await _run(ScrapeRequest(5, 1, want_authorized=True))
            unfiltered, _ = await _run(
                ScrapeRequest(5, 1, want_authorized=True, want_standard=True)
            )

        assert filtered == []
        assert [r.operating_status for r in unfiltered] == ["NOT ACTIVE"]

    async def test_results_export_to_csv(self, make_snapshot, not_found_html) -> None:
        with respx.mock() as mock:
            mock.get(_TEMPLATE.format(mc_number=1)).mock(
                return_value=httpx.Response(
                    200, text=make_snapshot({"Legal Name:": 'SMITH "FAST" LLC'})
                )
            )
            mock.get(_TEMPLATE.format(mc_number=2)).mock(
                return_value=httpx.Response(200, text=not_found_html)
            )
            records, _ = await _run(ScrapeRequest(1, 2, want_standard=True))

        rows = list(
            csv.reader(io.StringIO(render_csv(r.to_dict() for r in records).decode("utf-8")))
        )
        assert len(rows) == 2
        assert rows[1][1] == 'SMITH "FAST" LLC'
