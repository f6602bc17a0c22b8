"""
Test suite for date and currency primitives.

Tests cover:
- Fixed format order (year first, day first, month name, free-form)
- Calendar-invalid matches falling through to None
- Two-digit year expansion
- Currency rule precedence
"""

import datetime

import pytest

from billparser.models.invoice import Currency
from billparser.utils.currency import CURRENCY_MARKER, detect_currency
from billparser.utils.dates import (
    DATE_PATTERNS,
    expand_two_digit_year,
    month_from_name,
    normalize_date_text,
    parse_date,
)


class TestParseDate:
    """Date tokens resolve to calendar dates."""

    @pytest.mark.parametrize("text,expected", [
        ("2024-03-07", datetime.date(2024, 3, 7)),
        ("2024/3/7", datetime.date(2024, 3, 7)),
        ("07/03/2024", datetime.date(2024, 3, 7)),
        ("7-3-2024", datetime.date(2024, 3, 7)),
        ("07.03.2024", datetime.date(2024, 3, 7)),
        ("07/03/24", datetime.date(2024, 3, 7)),
        ("March 7, 2024", datetime.date(2024, 3, 7)),
        ("Mar 7th, 2024", datetime.date(2024, 3, 7)),
    ])
    def test_known_formats(self, text, expected):
        assert parse_date(text) == expected

    def test_day_first_wins_over_month_first(self):
        """Slashed dates are always read day/month/year."""
        assert parse_date("03/07/2024") == datetime.date(2024, 7, 3)

    def test_free_form_with_four_digit_year(self):
        assert parse_date("7 March 2024") == datetime.date(2024, 3, 7)

    def test_free_form_requires_four_digit_year(self):
        assert parse_date("7 March") is None

    @pytest.mark.parametrize("text", ["31/02/2024", "2024-02-30", "13/13/2024"])
    def test_invalid_calendar_dates(self, text):
        assert parse_date(text) is None

    @pytest.mark.parametrize("text", ["", None, "no date here", "Total 150.00"])
    def test_no_date(self, text):
        assert parse_date(text) is None


class TestDateHelpers:

    @pytest.mark.parametrize("date_pattern", DATE_PATTERNS, ids=lambda p: p.name)
    def test_each_pattern_parses_its_example(self, date_pattern):
        parsed = date_pattern.parse(normalize_date_text(date_pattern.example))
        assert parsed == datetime.date(2024, 3, 7)

    def test_two_digit_years(self):
        assert expand_two_digit_year(24) == 2024
        assert expand_two_digit_year(49) == 2049
        assert expand_two_digit_year(50) == 1950
        assert expand_two_digit_year(2024) == 2024

    def test_month_names(self):
        assert month_from_name("March") == 3
        assert month_from_name("sept") == 9
        assert month_from_name("Foo") is None

    def test_normalize_strips_ordinals_and_periods(self):
        assert normalize_date_text("7th 03.2024") == "7 03/2024"


class TestDetectCurrency:
    """Currency rules are checked in order; the first hit wins."""

    @pytest.mark.parametrize("text,expected", [
        ("Total ₹120", Currency.INR),
        ("Amount INR 120", Currency.INR),
        ("Rs 120", Currency.INR),
        ("Total $12.50", Currency.USD),
        ("Total €12,50", Currency.EUR),
        ("Total £12", Currency.GBP),
    ])
    def test_markers(self, text, expected):
        assert detect_currency(text) == expected

    def test_rupee_takes_precedence(self):
        assert detect_currency("Total ₹ 120 ($1.45)") == Currency.INR

    def test_default_when_unmarked(self):
        assert detect_currency("Total 120") == Currency.INR
        assert detect_currency("Total 120", default="USD") == Currency.USD
        assert detect_currency(None, default=Currency.GBP) == Currency.GBP

    def test_rs_must_be_a_word(self):
        """'Rs' at the end of a longer word is not a rupee marker."""
        assert detect_currency("Drs visit 120", default="USD") == Currency.USD
        assert CURRENCY_MARKER.search("Colours 12") is None
