"""
Field extractors for merchant, date and total.

Each field is resolved by an ordered tuple of strategies (see
billparser.utils.strategies); the first strategy returning a value wins.
Extractors only read the document, they never depend on each other.
"""

import datetime
import logging
import re
from typing import Callable, Optional, Sequence

from billparser.models.invoice import Currency, MonetaryAmount, RawDocument
from billparser.utils.currency import CURRENCY_MARKER, detect_currency
from billparser.utils.dates import parse_date
from billparser.utils.money import AMOUNT_TOKEN, LONG_AMOUNT_TOKEN, find_amounts
from billparser.utils.strategies import Strategy, run_strategies, select_max

logger = logging.getLogger(__name__)

UNKNOWN_MERCHANT = 'UNKNOWN'

# Header lines that describe the document rather than name the seller
ADMIN_KEYWORDS = re.compile(r'invoice|bill|receipt|gst|tax|phone|tel|address', re.IGNORECASE)
DIGITS_AND_PUNCTUATION_ONLY = re.compile(r'^[\d\W]+$')
MERCHANT_DISALLOWED_CHARS = re.compile(r'[^A-Za-z0-9 &\-.,/()]')
HAS_LETTER = re.compile(r'[A-Za-z]')

DATE_SHAPE = re.compile(
    r'\d{1,2}[/\-.\s]\d{1,2}[/\-.\s]\d{2,4}'
    r'|\d{4}[/\-.\s]\d{1,2}[/\-.\s]\d{1,2}'
    r'|[A-Za-z]{3,9}\s+\d{1,2},\s*\d{4}'
)

TOTAL_KEYWORDS = re.compile(
    r'total|grand total|net amount|amount due|balance due|payable|invoice total',
    re.IGNORECASE
)


# --- Merchant ---------------------------------------------------------------

def merchant_from_header(lines: Sequence[str], scan_lines: int = 6) -> Optional[str]:
    """First header line that is not an admin label or a run of digits."""
    for line in lines[:scan_lines]:
        line = line.replace('|', ' ').strip()
        if not line:
            continue
        if ADMIN_KEYWORDS.search(line):
            continue
        if DIGITS_AND_PUNCTUATION_ONLY.match(line):
            continue
        # The first qualifying line decides; if cleaning empties it, fall back
        return MERCHANT_DISALLOWED_CHARS.sub('', line).strip() or None
    return None


def merchant_from_longest_line(lines: Sequence[str], scan_lines: int = 6) -> Optional[str]:
    """Longest line with a letter that is not an admin label."""
    best = ''
    for line in lines:
        if len(line) > len(best) and HAS_LETTER.search(line) and not ADMIN_KEYWORDS.search(line):
            best = line
    return best or None


def merchant_sentinel(lines: Sequence[str], scan_lines: int = 6) -> Optional[str]:
    return UNKNOWN_MERCHANT


MERCHANT_STRATEGIES = (
    Strategy('header_line', merchant_from_header),
    Strategy('longest_line', merchant_from_longest_line),
    Strategy('sentinel', merchant_sentinel),
)


def extract_merchant(document: RawDocument, scan_lines: int = 6) -> str:
    """
    Extract the merchant name.

    Args:
        document: Normalized document
        scan_lines: How many leading lines count as the header

    Returns:
        Merchant name, or "UNKNOWN"
    """
    result = run_strategies(MERCHANT_STRATEGIES, document.lines, scan_lines=scan_lines)
    logger.debug("Merchant resolved by %s", result.strategy)
    return result.value


# --- Date -------------------------------------------------------------------

def date_from_date_shapes(document: RawDocument) -> Optional[datetime.date]:
    """Parse date-shaped substrings of the raw text in order of appearance."""
    for candidate in DATE_SHAPE.findall(document.raw):
        parsed = parse_date(candidate)
        if parsed is not None:
            return parsed
    return None


def date_from_lines(document: RawDocument) -> Optional[datetime.date]:
    """Parse whole lines; used when no date-shaped substring parsed."""
    for line in document.lines:
        parsed = parse_date(line)
        if parsed is not None:
            return parsed
    return None


DATE_STRATEGIES = (
    Strategy('date_shape', date_from_date_shapes),
    Strategy('whole_line', date_from_lines),
)


def extract_date(document: RawDocument) -> Optional[datetime.date]:
    """Extract the bill date, or None."""
    result = run_strategies(DATE_STRATEGIES, document)
    if result is None:
        return None
    logger.debug("Date resolved by %s", result.strategy)
    return result.value


# --- Total ------------------------------------------------------------------

def total_candidates_from_tail(document: RawDocument, tail_lines: int = 20) -> list:
    """Amounts on total-keyword or currency-marked lines near the end."""
    candidates = []
    for line in document.lines[-tail_lines:] if tail_lines > 0 else ():
        if TOTAL_KEYWORDS.search(line) or CURRENCY_MARKER.search(line):
            candidates.extend(find_amounts(line, AMOUNT_TOKEN))
    return candidates


def total_candidates_from_raw(document: RawDocument) -> list:
    """Every non-zero numeric-looking token in the raw text."""
    return [value for value in find_amounts(document.raw, LONG_AMOUNT_TOKEN) if value]


def extract_total(
    document: RawDocument,
    tail_lines: int = 20,
    selector: Callable[[Sequence[int]], Optional[int]] = select_max,
    default_currency: Currency = Currency.INR,
) -> Optional[MonetaryAmount]:
    """
    Extract the declared total.

    Tail lines flagged by a total keyword or currency marker are preferred;
    the whole raw text is the fallback, where the largest value wins.

    Args:
        document: Normalized document
        tail_lines: How many trailing lines to inspect
        selector: Picks one amount from the tail candidates
        default_currency: Currency when the text carries no marker

    Returns:
        MonetaryAmount, or None when the text has no numbers at all
    """
    strategies = (
        Strategy('tail_lines', lambda doc: selector(total_candidates_from_tail(doc, tail_lines))),
        Strategy('whole_text', lambda doc: select_max(total_candidates_from_raw(doc))),
    )
    result = run_strategies(strategies, document)
    if result is None:
        return None

    logger.debug("Total %s resolved by %s", result.value, result.strategy)
    return MonetaryAmount(
        minor_units=result.value,
        currency=detect_currency(document.raw, default=default_currency),
    )
