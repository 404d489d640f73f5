import re

from onboarding.utils.formatting import (
    BLANK_DATE,
    add_months,
    doc_id,
    escape_html,
    format_currency,
    format_long_date,
)
from onboarding.utils.filesystem import sanitize_filename


class TestEscaping:
    def test_escapes_all_special_characters(self):
        assert escape_html("<a href=\"x\">Tom & Jerry's</a>") == (
            "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#39;s&lt;/a&gt;"
        )

    def test_none_is_empty(self):
        assert escape_html(None) == ""

    def test_not_idempotent(self):
        assert escape_html(escape_html("&")) == "&amp;amp;"


class TestDocumentId:
    def test_format(self):
        assert re.match(r"^SGM-[0-9A-Z]+-[0-9A-Z]{5}$", doc_id())

    def test_unique(self):
        assert len({doc_id() for _ in range(50)}) == 50


class TestCurrencyAndDates:
    def test_format_currency(self):
        assert format_currency(1234) == "$1,234.00"
        assert format_currency(0) == "$0.00"
        assert format_currency(99.5) == "$99.50"
        assert format_currency(-12.5) == "-$12.50"

    def test_long_date(self):
        assert format_long_date("2025-01-05") == "January 5, 2025"
        assert format_long_date("2025-03-15T10:00:00Z") == "March 15, 2025"
        assert format_long_date(None) == BLANK_DATE
        assert format_long_date("not a date") == BLANK_DATE

    def test_add_months(self):
        assert add_months("2025-01-15", 3) == "2025-04-15"
        assert add_months("2025-11-30", 3) == "2026-03-02"
        assert add_months(None, 3) is None

    def test_add_months_rolls_overflow_forward(self):
        assert add_months("2025-01-31", 1) == "2025-03-03"
        assert add_months("2024-01-31", 1) == "2024-03-02"


class TestFilenames:
    def test_sanitize(self):
        assert sanitize_filename("My Offer/Letter?.pdf") == "My_Offer_Letter_.pdf"
