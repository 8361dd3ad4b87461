#!/usr/bin/env python
"""Scrape an MC-number range locally and write the matches to CSV.

Runs the same worker loop as the Celery task but without a database, queue
or quota.  Useful for checking extraction against the live site.

Usage::

    python scripts/scrape_range.py 1580000 25 --carriers --authorized -o out.csv

Exit codes:
    0 — Success (the CSV may contain only a header).
    2 — Invalid arguments.
"""

from __future__ import annotations

import argparse
import asyncio
import functools
import os
import sys

# Ensure the src layout is on sys.path when running as a standalone script.
_SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
_SRC_DIR = os.path.join(os.path.dirname(_SCRIPT_DIR), "src")
if _SRC_DIR not in sys.path:
    sys.path.insert(0, _SRC_DIR)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    from fmcsa_registry.scraper.config import (  # noqa: PLC0415
        DEFAULT_DELAY_MAX,
        DEFAULT_DELAY_MIN,
        DEFAULT_TIMEOUT,
    )

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("start", type=int, help="first MC number")
    parser.add_argument("count", type=int, help="number of sequential MC numbers")
    parser.add_argument("--carriers", action="store_true", help="keep carriers")
    parser.add_argument("--brokers", action="store_true", help="keep brokers")
    parser.add_argument(
        "--authorized", action="store_true", help="keep authorized entities only"
    )
    parser.add_argument(
        "--standard", action="store_true", help="do not filter on operating status"
    )
    parser.add_argument("--delay-min", type=float, default=DEFAULT_DELAY_MIN)
    parser.add_argument("--delay-max", type=float, default=DEFAULT_DELAY_MAX)
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT)
    parser.add_argument("--strategy", choices=("regex", "soup"), default="regex")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument(
        "-o", "--output", help="CSV path (default: fmcsa_<start>_<end>.csv)"
    )
    args = parser.parse_args(argv)
    if args.start < 0 or args.count < 0:
        parser.error("start and count must be >= 0")
    if args.delay_min < 0 or args.delay_max < args.delay_min:
        parser.error("need 0 <= --delay-min <= --delay-max")
    return args


async def _run(args: argparse.Namespace) -> int:
    import httpx  # noqa: PLC0415

    from fmcsa_registry.scraper.csv_export import csv_filename, render_csv  # noqa: PLC0415
    from fmcsa_registry.scraper.filters import ScrapeRequest  # noqa: PLC0415
    from fmcsa_registry.scraper.http_fetcher import fetch_snapshot  # noqa: PLC0415
    from fmcsa_registry.scraper.locators import get_locator_class  # noqa: PLC0415
    from fmcsa_registry.scraper.worker import ScrapeWorker  # noqa: PLC0415

    request = ScrapeRequest(
        start_id=args.start,
        count=args.count,
        want_carriers=args.carriers,
        want_brokers=args.brokers,
        want_authorized=args.authorized,
        want_standard=args.standard,
    )

    async with httpx.AsyncClient(follow_redirects=True) as client:
        worker = ScrapeWorker(
            functools.partial(fetch_snapshot, client=client, timeout=args.timeout),
            delay_min=args.delay_min,
            delay_max=args.delay_max,
            locator_cls=get_locator_class(args.strategy),
        )
        records = await worker.run(request)

    output = args.output or csv_filename(args.start, args.count)
    with open(output, "wb") as fh:
        fh.write(render_csv(record.to_dict() for record in records))

    print(f"[scrape_range] {len(records)} records written to {output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    from fmcsa_registry.core.logging_config import configure_logging  # noqa: PLC0415

    args = _parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
