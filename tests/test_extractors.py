"""
Test suite for normalization and the merchant / date / total extractors.
"""

import datetime

from billparser.models.invoice import Currency
from billparser.services.extractors import (
    UNKNOWN_MERCHANT,
    extract_date,
    extract_merchant,
    extract_total,
    merchant_from_header,
    total_candidates_from_tail,
)
from billparser.services.normalizer import build_document, normalize_text, to_lines
from billparser.utils.strategies import select_last


class TestNormalizer:

    def test_collapses_whitespace_and_drops_blank_lines(self):
        text = "  Cafe\t\tBlue \r\n\r\n\n  Coffee   2  150.00 \n   \n"
        assert to_lines(text) == ("Cafe Blue", "Coffee 2 150.00")

    def test_non_breaking_spaces_collapse(self):
        assert normalize_text("Total\u00a0\u00a012") == "Total 12"

    def test_empty_input(self):
        document = build_document(None)
        assert document.raw == ""
        assert document.is_empty

    def test_raw_text_is_kept_verbatim(self):
        document = build_document("A\r\nB")
        assert document.raw == "A\r\nB"
        assert document.lines == ("A", "B")


class TestExtractMerchant:
    """Merchant comes from the first usable header line."""

    def test_skips_admin_and_numeric_lines(self):
        document = build_document("TAX INVOICE\n0123-456789\nCafe Blue\nCoffee 2 150.00 300.00")
        assert extract_merchant(document) == "Cafe Blue"

    def test_strips_disallowed_characters(self):
        document = build_document("** Cafe Blue & Co. **\nTotal 10")
        assert extract_merchant(document) == "Cafe Blue & Co."

    def test_pipes_become_spaces(self):
        assert merchant_from_header(["Cafe|Blue"]) == "Cafe Blue"

    def test_header_scan_is_limited(self):
        """Only the first scan_lines lines are considered as header."""
        lines = ["Invoice", "Bill No 12", "Cafe Blue"]
        assert merchant_from_header(lines, scan_lines=2) is None
        assert merchant_from_header(lines, scan_lines=3) == "Cafe Blue"

    def test_falls_back_to_longest_lettered_line(self):
        document = build_document("INVOICE\n12345\n\nThanks for visiting\nServed by Asha")
        assert extract_merchant(document, scan_lines=2) == "Thanks for visiting"

    def test_sentinel_when_nothing_qualifies(self):
        document = build_document("INVOICE\n12345\nPhone 98765")
        assert extract_merchant(document) == UNKNOWN_MERCHANT


class TestExtractDate:

    def test_first_date_shape_wins(self):
        document = build_document("Cafe Blue\nDate: 07/03/2024\nDue: 2024-04-01")
        assert extract_date(document) == datetime.date(2024, 3, 7)

    def test_skips_invalid_shapes(self):
        document = build_document("Ref 45.99 12\nDate 2024-03-07")
        assert extract_date(document) == datetime.date(2024, 3, 7)

    def test_whole_line_fallback(self):
        """Lines are parsed whole when no date-shaped substring parses."""
        document = build_document("Cafe Blue\n7 March 2024\nTotal 120")
        assert extract_date(document) == datetime.date(2024, 3, 7)

    def test_whole_line_fallback_after_price_rows(self):
        """Price rows look date-shaped but do not block the line fallback."""
        document = build_document("7 March 2024\nCoffee 2 150.00 300.00")
        assert extract_date(document) == datetime.date(2024, 3, 7)

    def test_no_date(self):
        assert extract_date(build_document("Cafe Blue\nTotal 120")) is None


class TestExtractTotal:
    """Declared total from tail lines, falling back to the whole text."""

    def test_keyword_line(self):
        document = build_document("Cafe Blue\nItem 100\nTotal: Rs 1,234.50")
        total = extract_total(document)
        assert total.minor_units == 123450
        assert total.currency == Currency.INR
        assert total.inferred is False

    def test_currency_marker_line_and_currency(self):
        total = extract_total(build_document("Diner\nBurger 9.00\nPaid $12.50"))
        assert total.minor_units == 1250
        assert total.currency == Currency.USD

    def test_largest_tail_candidate_by_default(self):
        document = build_document("Shop\nSubtotal ₹500.00\nTotal ₹472.00")
        assert total_candidates_from_tail(document) == [50000, 47200]
        assert extract_total(document).minor_units == 50000

    def test_last_candidate_selector(self):
        document = build_document("Shop\nSubtotal ₹500.00\nTotal ₹472.00")
        assert extract_total(document, selector=select_last).minor_units == 47200

    def test_tail_window(self):
        document = build_document("Total 900.00\nA\nB\nC")
        assert total_candidates_from_tail(document, tail_lines=3) == []

    def test_whole_text_fallback_ignores_zero(self):
        total = extract_total(build_document("Cafe\nAmount 0.00 45.50"))
        assert total.minor_units == 4550

    def test_default_currency_without_marker(self):
        total = extract_total(build_document("Cafe\nAmount 45.50"), default_currency=Currency.USD)
        assert total.currency == Currency.USD

    def test_no_numbers(self):
        assert extract_total(build_document("Hello\nWorld")) is None
