"""Celery application for the FMCSA registry scraper.

Configures the broker, result backend, serialization and task routing.  All
configuration values are sourced from ``Settings`` so that no secrets or
environment-specific values are hard-coded here.

Usage (starting a worker)::

    celery -A fmcsa_registry.workers.celery_app worker -Q scraping --loglevel=info
"""

from __future__ import annotations

import logging

from celery import Celery
from celery.signals import setup_logging, worker_process_init
from dotenv import load_dotenv

_logger = logging.getLogger(__name__)

load_dotenv()

from fmcsa_registry.config.settings import get_settings  # noqa: E402

settings = get_settings()

#: The global Celery application instance.
celery_app = Celery(
    "fmcsa_registry",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "fmcsa_registry.scraper.tasks",
    ],
)

# ---------------------------------------------------------------------------
# Core configuration
# ---------------------------------------------------------------------------

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # Acknowledge after completion so a crashed worker does not lose the job.
    task_acks_late=True,
    # One long scrape at a time per worker process.
    worker_prefetch_multiplier=1,
    result_expires=86_400,
    task_routes={
        "fmcsa_registry.scraper.tasks.run_scrape_job_task": {
            "queue": "scraping",
        },
    },
)


# ---------------------------------------------------------------------------
# Logging: hand the root logger to structlog instead of Celery's defaults
# ---------------------------------------------------------------------------
@setup_logging.connect
def _configure_worker_logging(**kwargs: object) -> None:  # noqa: ARG001
    from fmcsa_registry.core.logging_config import configure_logging  # noqa: PLC0415

    configure_logging(get_settings().log_level)


# ---------------------------------------------------------------------------
# Engine disposal on fork
# ---------------------------------------------------------------------------
@worker_process_init.connect
def _dispose_engines_on_fork(**kwargs: object) -> None:  # noqa: ARG001
    """Dispose SQLAlchemy engines after Celery forks a worker process.

    Pooled connections inherited from the parent cannot be shared with the
    child; disposing without closing leaves the parent's sockets alone and
    makes the child open its own.
    """
    from fmcsa_registry.core import database as _db  # noqa: PLC0415

    _db.async_engine.sync_engine.dispose(close=False)
    _db.sync_engine.dispose(close=False)
