"""CSV rendering of a completed job's stored records."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Mapping
from typing import Any

from fmcsa_registry.scraper.record_extractor import RECORD_FIELDS


def _safe_str(value: Any) -> str:  # noqa: ANN401
    """Coerce a stored value to a CSV cell; ``None`` becomes ``""``."""
    if value is None:
        return ""
    return str(value)


def csv_filename(start_point: int, records: int) -> str:
    """Return the download name ``fmcsa_{start}_{end}.csv`` for a job range."""
    return f"fmcsa_{start_point}_{start_point + records}.csv"


def render_csv(records: Iterable[Mapping[str, Any]]) -> bytes:
    """Render serialised records as UTF-8 CSV.

    The header row lists the keys of the first record (the
    ``CarrierRecord`` field order for anything this service stored).  An
    empty result still gets the standard header.  Every cell is quoted and
    embedded double quotes are doubled, so free-text fields containing
    commas, quotes or line breaks survive a round trip through any CSV
    reader.

    Args:
        records: Dicts as produced by ``CarrierRecord.to_dict()``.

    Returns:
        Encoded CSV bytes with ``\\n`` line endings.
    """
    rows = list(records)
    columns = list(rows[0].keys()) if rows else list(RECORD_FIELDS)

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(columns)
    for rec in rows:
        writer.writerow([_safe_str(rec.get(col)) for col in columns])

    return buf.getvalue().encode("utf-8")
