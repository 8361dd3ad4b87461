"""Field locators: how a label's value is found in snapshot markup.

The SAFER snapshot page is a table of ``<th>label:</th><td>value</td>``
rows, but the exact markup around labels (anchors, attributes, casing,
line breaks) has shifted over time.  A :class:`FieldLocator` hides that
from the extraction policy in
:mod:`fmcsa_registry.scraper.record_extractor`: it answers one question,
"what text sits next to this label?", and returns ``""`` when it cannot
tell.

Two strategies are provided:

- :class:`RegexFieldLocator`: a pattern scan over the raw markup.  Tolerant
  of malformed HTML and cheap.
- :class:`SoupFieldLocator`: a structured query over a BeautifulSoup tree.
  Tolerant of attribute and nesting changes, but pays a full parse.

Select one with :func:`get_locator_class`.
"""

from __future__ import annotations

import html as html_module
import re
from abc import ABC, abstractmethod

from bs4 import BeautifulSoup

from fmcsa_registry.core.exceptions import ExtractionError

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(raw: str) -> str:
    """Strip markup tags, decode entities, and collapse whitespace.

    ``&nbsp;`` decodes to U+00A0, which ``\\s`` matches, so padding cells
    such as ``CARRIER&nbsp;`` come back as ``CARRIER``.
    """
    text = _TAG_RE.sub(" ", raw)
    text = html_module.unescape(text)
    return _WHITESPACE_RE.sub(" ", text).strip()


class FieldLocator(ABC):
    """Locates the value adjacent to a field label in one page.

    Implementations are constructed once per page and may pre-process the
    markup in ``__init__``.  ``locate`` must return ``""`` for a missing
    label and may raise :class:`ExtractionError` for markup it cannot
    query; callers treat both as an empty field.
    """

    name: str = ""

    def __init__(self, html: str) -> None:
        if not isinstance(html, str):
            raise ExtractionError(f"expected markup string, got {type(html).__name__}")
        self.html = html

    @abstractmethod
    def locate(self, label: str) -> str:
        """Return the cleaned text adjacent to *label*, or ``""``.

        Args:
            label: Field label including its trailing colon, e.g.
                ``"USDOT Number:"``.
        """


class RegexFieldLocator(FieldLocator):
    """Pattern-based locator for label/cell adjacency.

    Matches the label, then any run of tags other than ``<td>`` (closing
    ``</a>``, ``</th>``, line breaks) with nothing but whitespace between
    them, then captures the body of the next ``<td>`` cell.  Requiring that
    no text sits between label and cell keeps a missing value from
    borrowing the next row's cell.
    """

    name = "regex"

    _SUFFIX = r"(?:\s*<(?!td\b)[^>]*>)*\s*<td\b[^>]*>(.*?)</td>"

    def __init__(self, html: str) -> None:
        super().__init__(html)
        self._patterns: dict[str, re.Pattern[str]] = {}

    def _pattern(self, label: str) -> re.Pattern[str]:
        pattern = self._patterns.get(label)
        if pattern is None:
            pattern = re.compile(
                re.escape(label) + self._SUFFIX,
                re.IGNORECASE | re.DOTALL,
            )
            self._patterns[label] = pattern
        return pattern

    def locate(self, label: str) -> str:
        match = self._pattern(label).search(self.html)
        if match is None:
            return ""
        return clean_text(match.group(1))


class SoupFieldLocator(FieldLocator):
    """Structured-document locator built on BeautifulSoup.

    Finds the first ``<th>`` whose text contains the label and returns the
    text of the ``<td>`` that follows it in document order.
    """

    name = "soup"

    def __init__(self, html: str) -> None:
        super().__init__(html)
        try:
            self._soup = BeautifulSoup(html, "html.parser")
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(f"unparseable markup: {exc}") from exc

    def locate(self, label: str) -> str:
        needle = label.casefold()
        header = self._soup.find(
            lambda tag: tag.name == "th" and needle in tag.get_text(" ").casefold()
        )
        if header is None:
            return ""
        cell = header.find_next("td")
        if cell is None:
            return ""
        # get_text() has already decoded entities; only collapse whitespace.
        return _WHITESPACE_RE.sub(" ", cell.get_text(" ")).strip()


_LOCATORS: dict[str, type[FieldLocator]] = {
    RegexFieldLocator.name: RegexFieldLocator,
    SoupFieldLocator.name: SoupFieldLocator,
}


def get_locator_class(strategy: str) -> type[FieldLocator]:
    """Return the locator class registered under *strategy*.

    Raises:
        KeyError: If *strategy* is not ``"regex"`` or ``"soup"``.
    """
    try:
        return _LOCATORS[strategy]
    except KeyError:
        raise KeyError(
            f"Unknown extraction strategy '{strategy}'. "
            f"Available: {sorted(_LOCATORS)}"
        ) from None
