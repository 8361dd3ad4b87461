"""Structured JSON logging configuration using structlog.

Call ``configure_logging()`` once per process: the API does it in
``api/main.py``, Celery workers do it from the ``setup_logging`` signal in
``workers/celery_app.py``.  Modules then log through either API:

Stdlib usage (scraper internals)::

    import logging
    logger = logging.getLogger(__name__)
    logger.info("scraper: MC %d skipped: %s", mc_number, reason)

Structlog usage (routes, tasks)::

    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("scrape_job_created", job_id=job_id, records=100)

Two context sources are merged into every record: the per-request
``request_id`` populated by the HTTP middleware, and any job context bound
with :func:`bind_job_context` inside a Celery task.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, WrappedLogger

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
"""Per-request ID propagated from the HTTP middleware to log processors."""


_SECRET_SUBSTRINGS: frozenset[str] = frozenset({
    "password",
    "secret",
    "token",
    "authorization",
    "bearer",
    "api_key",
    "cookie",
})
"""Lower-cased substrings that identify event-dict keys whose values are
redacted before the record reaches a renderer."""

_REDACTED = "[REDACTED]"


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Replace values of secret-bearing keys, including one nested dict level."""
    for key in list(event_dict.keys()):
        if any(secret in key.lower() for secret in _SECRET_SUBSTRINGS):
            event_dict[key] = _REDACTED
            continue
        value = event_dict[key]
        if isinstance(value, dict):
            event_dict[key] = {
                k: (_REDACTED if any(s in str(k).lower() for s in _SECRET_SUBSTRINGS) else v)
                for k, v in value.items()
            }
    return event_dict


def _inject_request_id(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Add ``request_id`` from the ContextVar when no bound value exists."""
    rid = request_id_var.get()
    if rid is not None and "request_id" not in event_dict:
        event_dict["request_id"] = rid
    return event_dict


def bind_job_context(job_id: str, **extra: object) -> None:
    """Bind a scrape job's identity to every log line of the current context.

    Celery tasks call this at start so that log lines emitted deep inside
    the worker loop (through stdlib ``logging``) carry ``job_id``.

    Args:
        job_id: UUID string of the scrape job.
        **extra: Additional key/value pairs to bind (e.g. ``user_id``).
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(job_id=job_id, **extra)


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    ``DEBUG`` selects a coloured console renderer for local development;
    every other level renders newline-delimited JSON.  Each record carries
    ``timestamp``, ``level``, ``logger``, ``event`` and any bound context.

    Safe to call repeatedly: the root handler list is replaced each time.

    Args:
        log_level: Logging verbosity string, case-insensitive.
    """
    level_upper = log_level.upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)
    is_development = level_upper == "DEBUG"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _inject_request_id,
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if is_development:
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    # One line per outbound lookup is too chatty outside DEBUG.
    if not is_development:
        for noisy_logger in ("uvicorn.access", "httpx", "httpcore"):
            logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
