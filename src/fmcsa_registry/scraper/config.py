"""Constants and tuning parameters for the SAFER snapshot scraper."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Upstream endpoint
# ---------------------------------------------------------------------------

#: SAFER company-snapshot query by MC/MX number.  ``{mc_number}`` is the
#: only placeholder.
LOOKUP_URL_TEMPLATE: str = (
    "https://safer.fmcsa.dot.gov/query.asp?searchtype=ANY"
    "&query_type=queryCarrierSnapshot&query_param=MC_MX"
    "&query_string={mc_number}"
)

#: Browser-like user-agent; the snapshot site serves error pages to
#: obvious bots.
USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# Fetch timing
# ---------------------------------------------------------------------------

#: Default minimum inter-request delay (seconds).
DEFAULT_DELAY_MIN: float = 0.5

#: Default maximum inter-request delay (seconds).
DEFAULT_DELAY_MAX: float = 2.0

#: Default HTTP request timeout in seconds.
DEFAULT_TIMEOUT: int = 30

# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

#: Literal that every carrier detail page contains.  Pages without it are
#: "record not found" or error pages and are skipped before field lookup.
PRESENCE_MARKER: str = "Legal Name:"

#: Substring of ``operating_status`` that marks an authorized entity.
AUTHORIZED_MARKER: str = "AUTHORIZED"

#: Maximum stored length of legal and DBA names.
MAX_NAME_LENGTH: int = 200

#: Maximum stored length of physical and mailing addresses.
MAX_ADDRESS_LENGTH: int = 300

# ---------------------------------------------------------------------------
# Entity types
# ---------------------------------------------------------------------------

ENTITY_CARRIER: str = "CARRIER"
ENTITY_BROKER: str = "BROKER"
