"""
Shared money parsing utilities with locale-ambiguous separator support.

Amounts are always integer minor units (paise, cents). Handles:
- US / Indian grouping: 1,234.56 or 1,23,456.78
- European: 1.234,56
- Grouping only: 1,234 → 1234.00
- Negative: -12.34
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional, Union
import re

from billparser.models.invoice import Currency

# Characters a numeric token may keep after cleaning
_TOKEN_JUNK = re.compile(r'[^\d,.\-]')
_FIRST_NUMBER = re.compile(r'-?\d+(?:\.\d+)?')

# Loose token shapes used by the extractors
AMOUNT_TOKEN = re.compile(r'-?[\d.,]+')
ITEM_AMOUNT_TOKEN = re.compile(r'-?[\d.,]+(?:\.\d{1,2})?')
LONG_AMOUNT_TOKEN = re.compile(r'-?[\d,.]{2,}')

# Number-shaped substring, optionally prefixed by a currency symbol
AMOUNT_SHAPE = re.compile(r'[₹$€£]?-?\d{1,3}[0-9,]*(?:\.\d{1,2})?')

CURRENCY_SYMBOLS = {
    Currency.INR: '₹',
    Currency.USD: '$',
}


def round_half_up(value: Union[Decimal, int, float]) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Examples:
        >>> round_half_up(Decimal('2.5'))
        3
        >>> round_half_up(Decimal('123.4'))
        123
    """
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def parse_amount(token: Optional[str]) -> Optional[int]:
    """
    Parse a numeric token into integer minor units.

    The decimal separator is resolved from the token itself: when both a
    comma and a period appear, whichever comes last is the decimal point.
    Commas on their own are grouping marks.

    Args:
        token: Substring suspected to encode a number (e.g. "₹1,234.56")

    Returns:
        Minor units, or None when no digits are recoverable

    Examples:
        >>> parse_amount("1,234.56")
        123456
        >>> parse_amount("1.234,56")
        123456
        >>> parse_amount("1,234")
        123400
        >>> parse_amount("Rs.") is None
        True
    """
    if not token:
        return None

    cleaned = _TOKEN_JUNK.sub('', str(token)).strip()
    if not cleaned:
        return None

    last_dot = cleaned.rfind('.')
    last_comma = cleaned.rfind(',')
    if last_dot > -1 and last_comma > -1:
        if last_dot > last_comma:
            cleaned = cleaned.replace(',', '')
        else:
            cleaned = cleaned.replace('.', '').replace(',', '.', 1)
    else:
        cleaned = cleaned.replace(',', '')

    match = _FIRST_NUMBER.search(cleaned)
    if not match:
        return None

    try:
        return round_half_up(Decimal(match.group(0)) * 100)
    except (InvalidOperation, ValueError):
        return None


def find_amounts(text: str, pattern: re.Pattern = AMOUNT_TOKEN) -> List[int]:
    """Parse every token matching `pattern` in `text`, skipping unparseable ones."""
    amounts = []
    for token in pattern.findall(text):
        value = parse_amount(token)
        if value is not None:
            amounts.append(value)
    return amounts


def currency_prefix(currency: Union[Currency, str]) -> str:
    """Symbol used in display strings: ₹ for INR, $ for USD, else 'CODE '."""
    currency = Currency(currency)
    return CURRENCY_SYMBOLS.get(currency, f"{currency.value} ")


def format_minor_units(amount: Optional[int], currency: Union[Currency, str] = Currency.INR) -> str:
    """
    Format minor units as a display string.

    Args:
        amount: Minor units, or None
        currency: Currency used to pick the prefix

    Returns:
        Formatted string (e.g., "₹1,234.56"), or "-" when absent

    Examples:
        >>> format_minor_units(123456)
        '₹1,234.56'
        >>> format_minor_units(-5, 'USD')
        '-$0.05'
        >>> format_minor_units(100000, 'EUR')
        'EUR 1,000.00'
    """
    if amount is None:
        return '-'

    sign = '-' if amount < 0 else ''
    major, minor = divmod(abs(int(amount)), 100)
    return f"{sign}{currency_prefix(currency)}{major:,}.{minor:02d}"
