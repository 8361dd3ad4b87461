"""Structured record extraction from SAFER snapshot markup.

The extraction policy lives here: which labels are read, how long values
may be, and which fields are mandatory.  How a label's value is found in
the markup is delegated to a :class:`~fmcsa_registry.scraper.locators.FieldLocator`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any

from fmcsa_registry.core.exceptions import ExtractionError
from fmcsa_registry.scraper.config import (
    MAX_ADDRESS_LENGTH,
    MAX_NAME_LENGTH,
    PRESENCE_MARKER,
)
from fmcsa_registry.scraper.locators import FieldLocator, RegexFieldLocator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Output dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CarrierRecord:
    """One motor-carrier registry entry as read from a snapshot page.

    Field order is the persisted and exported column order.

    Attributes:
        mc_number: The queried MC number, as a string.
        legal_name: Registered legal name (at most 200 characters).
        dba_name: "Doing business as" name (at most 200 characters).
        entity_type: e.g. ``"CARRIER"``, ``"BROKER"``.
        operating_status: Free-text authority status.
        physical_address: At most 300 characters.
        mailing_address: At most 300 characters.
        phone: Contact phone number.
        usdot_number: USDOT number; never empty.
        state_carrier_id: Optional, ``""`` when absent.
        power_units: Optional, ``""`` when absent.
        drivers: Optional, ``""`` when absent.
        duns_number: Optional, ``""`` when absent.
        mcs150_date: Optional, ``""`` when absent.
        out_of_service_date: Optional, ``""`` when absent.
        scraped_at: UTC time the page was processed.
    """

    mc_number: str
    legal_name: str
    dba_name: str
    entity_type: str
    operating_status: str
    physical_address: str
    mailing_address: str
    phone: str
    usdot_number: str
    state_carrier_id: str
    power_units: str
    drivers: str
    duns_number: str
    mcs150_date: str
    out_of_service_date: str
    scraped_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable dict with ``scraped_at`` in ISO-8601."""
        data = asdict(self)
        data["scraped_at"] = self.scraped_at.isoformat()
        return data


#: Column names of a serialised record, in export order.
RECORD_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(CarrierRecord))

#: Attribute name -> (page label, maximum length or ``None``).
FIELD_LABELS: dict[str, tuple[str, int | None]] = {
    "legal_name": ("Legal Name:", MAX_NAME_LENGTH),
    "dba_name": ("DBA Name:", MAX_NAME_LENGTH),
    "entity_type": ("Entity Type:", None),
    "operating_status": ("Operating Authority Status:", None),
    "physical_address": ("Physical Address:", MAX_ADDRESS_LENGTH),
    "mailing_address": ("Mailing Address:", MAX_ADDRESS_LENGTH),
    "phone": ("Phone:", None),
    "usdot_number": ("USDOT Number:", None),
    "state_carrier_id": ("State Carrier ID Number:", None),
    "power_units": ("Power Units:", None),
    "drivers": ("Drivers:", None),
    "duns_number": ("DUNS Number:", None),
    "mcs150_date": ("MCS-150 Form Date:", None),
    "out_of_service_date": ("Out of Service Date:", None),
}


# ---------------------------------------------------------------------------
# Public extraction function
# ---------------------------------------------------------------------------


def _locate(locator: FieldLocator, label: str, limit: int | None) -> str:
    try:
        value = locator.locate(label)
    except ExtractionError as exc:
        logger.debug("scraper: locator fault on %r: %s", label, exc)
        return ""
    if limit is not None:
        value = value[:limit]
    return value


def extract_record(
    html: str,
    mc_number: int | str,
    *,
    locator_cls: type[FieldLocator] = RegexFieldLocator,
    scraped_at: datetime | None = None,
) -> CarrierRecord | None:
    """Parse one snapshot page into a :class:`CarrierRecord`.

    Each field is located independently, so a locator fault on one label
    leaves only that field empty.

    Args:
        html: Raw page markup.
        mc_number: The identifier that was queried.
        locator_cls: :class:`FieldLocator` implementation to use.
        scraped_at: Timestamp to stamp on the record.  Defaults to now
            (UTC); pass a fixed value for reproducible output.

    Returns:
        The record, or ``None`` when the page is not a carrier detail page
        or lacks a legal name or USDOT number.
    """
    if PRESENCE_MARKER not in html:
        return None

    try:
        locator = locator_cls(html)
    except ExtractionError as exc:
        logger.info("scraper: MC %s unparseable: %s", mc_number, exc)
        return None

    values = {
        name: _locate(locator, label, limit)
        for name, (label, limit) in FIELD_LABELS.items()
    }

    if not values["legal_name"] or not values["usdot_number"]:
        return None

    return CarrierRecord(
        mc_number=str(mc_number),
        scraped_at=scraped_at or datetime.now(tz=timezone.utc),
        **values,
    )
