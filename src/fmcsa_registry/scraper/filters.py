"""Entity-type and operating-status filtering of extracted records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from fmcsa_registry.scraper.config import AUTHORIZED_MARKER, ENTITY_BROKER, ENTITY_CARRIER

if TYPE_CHECKING:
    from fmcsa_registry.scraper.record_extractor import CarrierRecord


@dataclass(frozen=True)
class ScrapeRequest:
    """A contiguous MC-number range plus the filters to apply to it.

    Attributes:
        start_id: First MC number to query.
        count: Number of sequential identifiers; the range is
            ``[start_id, start_id + count)``.
        want_carriers: Keep carrier entities.
        want_brokers: Keep broker entities.
        want_authorized: Keep entities whose status contains
            ``"AUTHORIZED"`` (when ``False``, keep only those without it).
        want_standard: Disable status filtering entirely.
    """

    start_id: int
    count: int
    want_carriers: bool = False
    want_brokers: bool = False
    want_authorized: bool = False
    want_standard: bool = False

    def __post_init__(self) -> None:
        if self.start_id < 0:
            raise ValueError(f"start_id must be >= 0, got {self.start_id}")
        if self.count < 0:
            raise ValueError(f"count must be >= 0, got {self.count}")

    @property
    def identifiers(self) -> range:
        return range(self.start_id, self.start_id + self.count)


@dataclass(frozen=True)
class RecordFilter:
    """Compiled form of a request's filter toggles.

    ``entity_types`` empty means every entity type passes.
    """

    entity_types: frozenset[str]
    want_authorized: bool
    want_standard: bool

    @classmethod
    def from_request(cls, request: ScrapeRequest) -> RecordFilter:
        if request.want_carriers and not request.want_brokers:
            entity_types = frozenset({ENTITY_CARRIER})
        elif request.want_brokers and not request.want_carriers:
            entity_types = frozenset({ENTITY_BROKER})
        else:
            entity_types = frozenset()
        return cls(
            entity_types=entity_types,
            want_authorized=request.want_authorized,
            want_standard=request.want_standard,
        )

    def matches(self, record: CarrierRecord) -> bool:
        if self.entity_types and record.entity_type not in self.entity_types:
            return False
        if self.want_standard:
            return True
        return (AUTHORIZED_MARKER in record.operating_status) == self.want_authorized


def matches(record: CarrierRecord, request: ScrapeRequest) -> bool:
    """Return ``True`` when *record* passes both filters of *request*."""
    return RecordFilter.from_request(request).matches(record)
