import pytest

from gemwatch.core.extract.text import (
    BID_NUMBER_PATTERN,
    RA_NUMBER_PATTERN,
    absolute_url,
    clean_lines,
    extract_first_match,
    extract_labeled_value,
    value_after_label,
)


class TestAbsoluteUrl:
    def test_empty(self):
        assert absolute_url("") == ""
        assert absolute_url(None) == ""

    def test_relative_path_gets_origin(self):
        assert absolute_url("/showbidDocument/123") == "https://bidplus.gem.gov.in/showbidDocument/123"

    def test_missing_separator_is_inserted(self):
        assert absolute_url("bidlists/9", "https://example.org/") == "https://example.org/bidlists/9"

    def test_absolute_unchanged(self):
        url = "https://other.example/doc.pdf"
        assert absolute_url(url) == url

    @pytest.mark.parametrize("href", ["", "/a/b", "c/d", "https://x.test/y", "#page-2"])
    def test_idempotent(self, href):
        once = absolute_url(href)
        assert absolute_url(once) == once


def test_extract_first_match():
    text = "BID NO: GEM/2025/B/6012345 RA NO: GEM/2025/R/501 GEM/2025/B/999"
    assert extract_first_match(BID_NUMBER_PATTERN, text) == "GEM/2025/B/6012345"
    assert extract_first_match(RA_NUMBER_PATTERN, text) == "GEM/2025/R/501"
    assert extract_first_match(RA_NUMBER_PATTERN, "no identifiers here") == ""
    assert extract_first_match(BID_NUMBER_PATTERN, None) == ""


def test_clean_lines_drops_blank_and_strips():
    assert clean_lines("  a \n\n\t\n b\r\nc  ") == ["a", "b", "c"]
    assert clean_lines("") == []
    assert clean_lines(None) == []


class TestValueAfterLabel:
    lines = ["Items:", "Road construction work", "Department Name And Address:", "Ministry of Defence"]

    def test_case_insensitive_prefix(self):
        assert value_after_label(self.lines, "department name") == "Ministry of Defence"

    def test_first_match_wins(self):
        assert value_after_label(["Items:", "one", "Items:", "two"], "Items:") == "one"

    def test_absent_label(self):
        assert value_after_label(self.lines, "Quantity:") == ""

    def test_label_on_last_line(self):
        assert value_after_label(["Items:", "x", "End Date:"], "End Date:") == ""


class TestLabeledValue:
    def test_rest_of_line(self):
        text = "Start Date: 01-01-2026 10:00 AM\nEnd Date: 15-01-2026 6:00 PM"
        assert extract_labeled_value("Start Date:", text) == "01-01-2026 10:00 AM"
        assert extract_labeled_value("End Date:", text) == "15-01-2026 6:00 PM"

    def test_absent(self):
        assert extract_labeled_value("End Date:", "Start Date: today") == ""
        assert extract_labeled_value("End Date:", None) == ""

    def test_bare_label_does_not_borrow_next_line(self):
        text = "Start Date:\nEnd Date: 15-01-2026 6:00 PM"
        assert extract_labeled_value("Start Date:", text) == ""
        assert extract_labeled_value("End Date:", text) == "15-01-2026 6:00 PM"
        assert extract_labeled_value("Start Date:", "Start Date:   \r\nnext") == ""
