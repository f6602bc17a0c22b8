"""
Date token parsing.

Formats are tried in a fixed order and the first one that yields a valid
calendar date wins:

1. Year first:   2024-03-07, 2024/3/7
2. Day first:    07/03/24, 7-3-2024, 07.03.2024
3. Month name:   March 7, 2024 / Mar 7th, 2024
4. Free-form:    anything python-dateutil understands, provided a 4-digit
                 year is present
"""

import datetime
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from dateutil import parser as date_parser

_ORDINAL_SUFFIX = re.compile(r'(\d+)(?:st|nd|rd|th)\b', re.IGNORECASE)
_FOUR_DIGIT_YEAR = re.compile(r'\b(?:19|20)\d{2}\b')

MONTH_PREFIXES = ('jan', 'feb', 'mar', 'apr', 'may', 'jun',
                  'jul', 'aug', 'sep', 'oct', 'nov', 'dec')

# Two-digit years at or above the pivot belong to the 1900s
TWO_DIGIT_YEAR_PIVOT = 50


@dataclass(frozen=True)
class DatePattern:
    """A named date regex and the function turning its groups into a date."""
    name: str
    pattern: str
    example: str
    build: Callable[[re.Match], Optional[datetime.date]]
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, re.IGNORECASE))

    def parse(self, text: str) -> Optional[datetime.date]:
        match = self.compiled.search(text)
        if not match:
            return None
        try:
            return self.build(match)
        except (ValueError, OverflowError):
            return None


def expand_two_digit_year(year: int) -> int:
    """Map 0-99 onto 1950-2049; longer years pass through."""
    if year < 100:
        year += 1900 if year >= TWO_DIGIT_YEAR_PIVOT else 2000
    return year


def month_from_name(name: str) -> Optional[int]:
    """1-based month number from a (possibly long) month name."""
    prefix = name[:3].lower()
    if prefix in MONTH_PREFIXES:
        return MONTH_PREFIXES.index(prefix) + 1
    return None


def _build_ymd(match: re.Match) -> datetime.date:
    return datetime.date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def _build_dmy(match: re.Match) -> datetime.date:
    year = expand_two_digit_year(int(match.group(3)))
    return datetime.date(year, int(match.group(2)), int(match.group(1)))


def _build_month_name(match: re.Match) -> Optional[datetime.date]:
    month = month_from_name(match.group(1))
    if month is None:
        return None
    return datetime.date(int(match.group(3)), month, int(match.group(2)))


DATE_PATTERNS = (
    DatePattern(
        name='year_first',
        pattern=r'(\d{4})[/-](\d{1,2})[/-](\d{1,2})',
        example='2024-03-07',
        build=_build_ymd,
    ),
    DatePattern(
        name='day_first',
        pattern=r'(?<!\d)(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})',
        example='07/03/24',
        build=_build_dmy,
    ),
    DatePattern(
        name='month_name',
        pattern=r'([A-Za-z]{3,9})\s+(\d{1,2}),\s*(\d{4})',
        example='March 7, 2024',
        build=_build_month_name,
    ),
)


def normalize_date_text(text: str) -> str:
    """Drop ordinal suffixes and turn period separators into slashes."""
    text = _ORDINAL_SUFFIX.sub(r'\1', text)
    return text.replace('.', '/')


def parse_free_form(text: str) -> Optional[datetime.date]:
    """Last-resort parse; only attempted when a 4-digit year is present."""
    if not _FOUR_DIGIT_YEAR.search(text):
        return None
    try:
        parsed = date_parser.parse(text, default=datetime.datetime(2000, 1, 1))
    except (ValueError, OverflowError):
        return None
    return parsed.date()


def parse_date(text: Optional[str]) -> Optional[datetime.date]:
    """
    Parse a text span into a calendar date.

    Args:
        text: Text that may contain a date

    Returns:
        datetime.date, or None when every format fails

    Examples:
        >>> parse_date("2024-03-07")
        datetime.date(2024, 3, 7)
        >>> parse_date("07/03/24")
        datetime.date(2024, 3, 7)
        >>> parse_date("March 7th, 2024")
        datetime.date(2024, 3, 7)
    """
    if not text:
        return None

    normalized = normalize_date_text(text)
    for date_pattern in DATE_PATTERNS:
        parsed = date_pattern.parse(normalized)
        if parsed is not None:
            return parsed

    # dateutil copes with "Mar. 7 2024" better than with the slashed form
    return parse_free_form(_ORDINAL_SUFFIX.sub(r'\1', text))
