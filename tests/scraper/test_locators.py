"""Unit tests for the regex and BeautifulSoup field locators."""

from __future__ import annotations

import pytest

from fmcsa_registry.core.exceptions import ExtractionError
from fmcsa_registry.scraper.locators import (
    FieldLocator,
    RegexFieldLocator,
    SoupFieldLocator,
    clean_text,
    get_locator_class,
)

_LOCATORS = [RegexFieldLocator, SoupFieldLocator]


class TestCleanText:
    def test_strips_tags_and_collapses_whitespace(self) -> None:
        assert clean_text("123 MAIN ST <br>\n   SPRINGFIELD") == "123 MAIN ST SPRINGFIELD"

    def test_decodes_entities_and_trims_nbsp(self) -> None:
        assert clean_text("CARRIER&nbsp;") == "CARRIER"
        assert clean_text("SMITH &amp; SONS") == "SMITH & SONS"

    def test_empty(self) -> None:
        assert clean_text("   ") == ""


@pytest.mark.parametrize("locator_cls", _LOCATORS)
class TestLocateOnSnapshot:
    def test_finds_value_behind_anchor_wrapped_label(self, locator_cls, make_snapshot) -> None:
        locator = locator_cls(make_snapshot())
        assert locator.locate("Legal Name:") == "ACME TRUCKING LLC"
        assert locator.locate("USDOT Number:") == "1234567"
        assert locator.locate("Entity Type:") == "CARRIER"

    def test_multi_line_cell_is_flattened(self, locator_cls, make_snapshot) -> None:
        locator = locator_cls(make_snapshot())
        assert locator.locate("Physical Address:") == "123 MAIN ST SPRINGFIELD, IL 62701"

    def test_missing_label_returns_empty(self, locator_cls, make_snapshot) -> None:
        locator = locator_cls(make_snapshot({"DBA Name:": None}))
        assert locator.locate("DBA Name:") == ""

    def test_empty_cell_does_not_borrow_next_row(self, locator_cls, make_snapshot) -> None:
        locator = locator_cls(make_snapshot())
        assert locator.locate("State Carrier ID Number:") == ""


class TestRegexFieldLocator:
    def test_label_match_is_case_insensitive_on_tags(self) -> None:
        html = "<tr><th>Phone:</th>\n<td class='x'>(555) 000-1111</td></tr>"
        assert RegexFieldLocator(html).locate("Phone:") == "(555) 000-1111"

    def test_text_between_label_and_cell_means_no_match(self) -> None:
        html = "<th>Phone:</th> unexpected text <td>(555) 000-1111</td>"
        assert RegexFieldLocator(html).locate("Phone:") == ""

    def test_rejects_non_string_markup(self) -> None:
        with pytest.raises(ExtractionError):
            RegexFieldLocator(b"<html></html>")  # type: ignore[arg-type]


class TestSoupFieldLocator:
    def test_ignores_nesting_and_attributes_around_label(self) -> None:
        html = (
            "<table><tr><th scope='row'><span><b>Drivers:</b></span></th>"
            "<td><font size='1'>14</font></td></tr></table>"
        )
        assert SoupFieldLocator(html).locate("Drivers:") == "14"

    def test_label_matching_is_case_insensitive(self) -> None:
        html = "<table><tr><th>DRIVERS:</th><td>9</td></tr></table>"
        assert SoupFieldLocator(html).locate("Drivers:") == "9"


class TestGetLocatorClass:
    def test_known_strategies(self) -> None:
        assert get_locator_class("regex") is RegexFieldLocator
        assert get_locator_class("soup") is SoupFieldLocator

    def test_unknown_strategy_raises_key_error(self) -> None:
        with pytest.raises(KeyError, match="Unknown extraction strategy"):
            get_locator_class("xpath")

    def test_registered_classes_are_field_locators(self) -> None:
        for name in ("regex", "soup"):
            assert issubclass(get_locator_class(name), FieldLocator)
