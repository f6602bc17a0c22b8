"""
Currency detection from free text.

Rules are checked in order and the first hit wins, so a bill carrying both
a rupee sign and a dollar sign resolves to INR.
"""

import re
from typing import Optional, Union

from billparser.models.invoice import Currency

CURRENCY_RULES = (
    (re.compile(r'₹|\bINR\b|\bRs\b', re.IGNORECASE), Currency.INR),
    (re.compile(r'\$'), Currency.USD),
    (re.compile(r'€'), Currency.EUR),
    (re.compile(r'£'), Currency.GBP),
)

# Any currency marker, used to flag total-bearing lines
CURRENCY_MARKER = re.compile(r'₹|\$|£|€|\bRs\b|\bINR\b', re.IGNORECASE)


def detect_currency(
    text: Optional[str],
    default: Union[Currency, str] = Currency.INR
) -> Currency:
    """
    Detect the currency of a text span.

    Args:
        text: Text to inspect
        default: Currency returned when no rule matches

    Returns:
        Detected Currency

    Examples:
        >>> detect_currency("Total ₹ 120 ($1.45)")
        <Currency.INR: 'INR'>
        >>> detect_currency("Total £12", default="USD")
        <Currency.GBP: 'GBP'>
    """
    if text:
        for pattern, currency in CURRENCY_RULES:
            if pattern.search(text):
                return currency
    return Currency(default)
