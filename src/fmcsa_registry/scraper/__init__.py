"""SAFER company-snapshot scraper.

Walks a range of MC numbers, turns each snapshot page into a
:class:`~fmcsa_registry.scraper.record_extractor.CarrierRecord`, and keeps
the ones that pass the requested filters.

Sub-modules:
- ``config``            — constants and tuning parameters
- ``http_fetcher``      — async httpx-based snapshot fetcher
- ``locators``          — regex and BeautifulSoup field locators
- ``record_extractor``  — snapshot page to ``CarrierRecord``
- ``filters``           — entity-type and operating-status filter
- ``worker``            — sequential range loop with randomized delay
- ``csv_export``        — CSV rendering of stored results
- ``tasks``             — Celery task (``run_scrape_job_task``)
- ``router``            — FastAPI router (``/scrape-jobs/``)
"""
