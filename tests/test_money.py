"""
Test suite for money parsing and formatting.

Tests cover:
- Separator disambiguation (US/Indian grouping vs European decimal comma)
- Unrecoverable tokens returning None
- Half-up rounding of sub-minor-unit values
- Display formatting per currency
"""

from decimal import Decimal

import pytest

from billparser.models.invoice import Currency
from billparser.utils.money import (
    AMOUNT_TOKEN,
    LONG_AMOUNT_TOKEN,
    currency_prefix,
    find_amounts,
    format_minor_units,
    parse_amount,
    round_half_up,
)


class TestParseAmount:
    """Tokens resolve to integer minor units."""

    @pytest.mark.parametrize("token,expected", [
        ("1,234.56", 123456),
        ("1.234,56", 123456),
        ("1,234", 123400),
        ("1,23,456.78", 12345678),
        ("₹150.00", 15000),
        ("Rs. 99.5", 9950),
        ("-12.34", -1234),
        ("0.00", 0),
    ])
    def test_separator_resolution(self, token, expected):
        assert parse_amount(token) == expected

    @pytest.mark.parametrize("token", ["", None, "Rs.", "abc", "--", ".,"])
    def test_no_digits_returns_none(self, token):
        assert parse_amount(token) is None

    def test_rounds_half_up(self):
        """Three decimal places round to the nearest minor unit, halves up."""
        assert parse_amount("1.005") == 101
        assert parse_amount("1.004") == 100

    def test_later_period_is_decimal_point(self):
        assert parse_amount("12,5.3") == 12530


class TestRoundHalfUp:

    def test_halves_go_up(self):
        assert round_half_up(Decimal('2.5')) == 3
        assert round_half_up(Decimal('3.5')) == 4

    def test_negative_halves_go_away_from_zero(self):
        assert round_half_up(Decimal('-2.5')) == -3

    def test_below_half_goes_down(self):
        assert round_half_up(Decimal('123.4')) == 123


class TestFindAmounts:

    def test_skips_unparseable_tokens(self):
        assert find_amounts("Total: 1,200.00 ... 15", AMOUNT_TOKEN) == [120000, 1500]

    def test_long_tokens_skip_single_digits(self):
        assert find_amounts("Coffee 2 150.00 300.00", LONG_AMOUNT_TOKEN) == [15000, 30000]


class TestFormatMinorUnits:
    """Display strings for amounts."""

    def test_inr_default(self):
        assert format_minor_units(123456) == '₹1,234.56'

    def test_usd(self):
        assert format_minor_units(1250, Currency.USD) == '$12.50'

    def test_other_currencies_use_code(self):
        assert format_minor_units(100000, 'EUR') == 'EUR 1,000.00'
        assert currency_prefix(Currency.GBP) == 'GBP '

    def test_negative_sign_before_symbol(self):
        assert format_minor_units(-5, 'USD') == '-$0.05'

    def test_absent_is_dash(self):
        assert format_minor_units(None) == '-'

    @pytest.mark.parametrize("amount", [0, 7, 15000, 123456, 99999999])
    def test_display_parses_back(self, amount):
        """A formatted amount parses back to the same minor units."""
        assert parse_amount(format_minor_units(amount)) == amount
