"""
Line-item segmentation and row-to-item mapping.

Rows are recovered in two merge passes (wrapped names, hyphenated words),
then every line holding both a letter and a digit is mapped to an item by
counting its numbers and assigning them quantity / price / total roles.

Known limitation: a "clean" whole number of major units (an exact multiple
of 100 minor units between 1 and 500) is read as a quantity. Bills that
print quantities any other way, or list round prices, can be misread.
"""

import logging
import re
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from billparser.models.invoice import Currency, LineItem, MonetaryAmount, RawDocument
from billparser.utils.currency import detect_currency
from billparser.utils.money import AMOUNT_SHAPE, ITEM_AMOUNT_TOKEN, find_amounts, round_half_up

logger = logging.getLogger(__name__)

HAS_DIGIT = re.compile(r'[0-9]')
HAS_LETTER = re.compile(r'[A-Za-z]')
TRAILING_HYPHENS = re.compile(r'-+$')
MULTI_SPACE = re.compile(r'\s{2,}')

MIN_QUANTITY = 1
MAX_QUANTITY = 500
# Prices above this (and above twice the row total) are taken for ids, not prices
PRICE_BOUND = 100_000_000
# b must exceed a by more than this ratio for (a, b) to read as (price, total)
PRICE_TOTAL_RATIO = Decimal('1.05')


def merge_wrapped_names(lines: Sequence[str]) -> Tuple[str, ...]:
    """Join a digit-free line with a following line that carries numbers."""
    merged = []
    i = 0
    while i < len(lines):
        line = lines[i]
        next_line = lines[i + 1] if i + 1 < len(lines) else ''
        if not HAS_DIGIT.search(line) and HAS_DIGIT.search(next_line):
            merged.append(f"{line} {next_line}".strip())
            i += 2
        else:
            merged.append(line)
            i += 1
    return tuple(merged)


def merge_hyphenated(lines: Sequence[str]) -> Tuple[str, ...]:
    """Join a line ending in a hyphen with the line after it."""
    merged = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if i < len(lines) - 1 and line.strip().endswith('-'):
            merged.append(f"{TRAILING_HYPHENS.sub('', line.strip())} {lines[i + 1]}".strip())
            i += 2
        else:
            merged.append(line)
            i += 1
    return tuple(merged)


def segment_rows(lines: Sequence[str]) -> Tuple[str, ...]:
    """Candidate item rows: merged lines holding a letter and a digit."""
    return tuple(
        line for line in merge_hyphenated(merge_wrapped_names(lines))
        if HAS_LETTER.search(line) and HAS_DIGIT.search(line)
    )


def _is_unit_count(value: int) -> bool:
    return value % 100 == 0 and MIN_QUANTITY <= value // 100 <= MAX_QUANTITY


def _plausible_quantity(total: int, price: int) -> Optional[int]:
    if not price:
        return None
    quantity = round_half_up(Decimal(total) / Decimal(price))
    if MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        return quantity
    return None


def item_name(line: str, max_length: int = 120) -> str:
    """Row text with amounts removed, whitespace collapsed, length capped."""
    name = MULTI_SPACE.sub(' ', AMOUNT_SHAPE.sub(' ', line)).strip()
    return name[:max_length] or '-'


def assign_roles(numbers: Sequence[int]) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """
    Split a row's numbers into (quantity, price, total).

    3+ numbers: the last is the total, the nearest earlier number within
    bounds is the price, the first clean unit count is the quantity.
    2 numbers: (price, total) when the second is clearly larger, otherwise
    (quantity, price) when the first is a clean unit count, otherwise
    (price, total).
    1 number: the total.
    """
    quantity = price = total = None

    if len(numbers) >= 3:
        total = numbers[-1]
        for candidate in reversed(numbers[:-1]):
            if abs(candidate) < max(PRICE_BOUND, abs(total * 2)):
                price = candidate
                break
        quantity = next((value // 100 for value in numbers if _is_unit_count(value)), None)
        if quantity is None and price and total:
            quantity = _plausible_quantity(total, price)

    elif len(numbers) == 2:
        first, second = numbers
        if second > first * PRICE_TOTAL_RATIO:
            price, total = first, second
            quantity = _plausible_quantity(second, first)
        elif _is_unit_count(first):
            quantity = first // 100
            price = second
            total = price * quantity
        else:
            price, total = first, second

    elif len(numbers) == 1:
        total = numbers[0]

    return quantity, price, total


def fill_missing(
    quantity: Optional[int],
    price: Optional[int],
    total: Optional[int]
) -> Tuple[int, Optional[int], Optional[int]]:
    """Derive whichever of quantity / price / total can be derived."""
    if price and not total:
        total = price * (quantity or 1)
    if total and not price and quantity:
        price = total // quantity
    if quantity is None:
        if price and total:
            quantity = max(1, round_half_up(Decimal(total) / Decimal(price)))
        else:
            quantity = 1
    return max(1, quantity), price, total


def map_row(
    line: str,
    default_currency: Currency = Currency.INR,
    name_max_length: int = 120
) -> Optional[LineItem]:
    """
    Map one row to a LineItem.

    Args:
        line: Candidate row text
        default_currency: Currency when the row has no marker
        name_max_length: Cap on the item name

    Returns:
        LineItem, or None when the row has no usable numbers

    Example:
        >>> item = map_row("Coffee 2 150.00 300.00")
        >>> item.name, item.quantity, item.unit_price.minor_units, item.total.minor_units
        ('Coffee', 2, 15000, 30000)
    """
    numbers = find_amounts(line, ITEM_AMOUNT_TOKEN)
    if not numbers:
        return None

    quantity, price, total = fill_missing(*assign_roles(numbers))
    if not (price or total):
        return None

    currency = detect_currency(line, default=default_currency)
    return LineItem(
        name=item_name(line, name_max_length),
        quantity=quantity,
        unit_price=MonetaryAmount(minor_units=price, currency=currency) if price is not None else None,
        total=MonetaryAmount(minor_units=total, currency=currency) if total is not None else None,
        currency=currency,
    )


def _dedupe_key(item: LineItem) -> tuple:
    return (
        item.name,
        item.total.minor_units if item.total is not None else None,
        item.unit_price.minor_units if item.unit_price is not None else None,
    )


def extract_items(
    document: RawDocument,
    default_currency: Currency = Currency.INR,
    name_max_length: int = 120
) -> Tuple[LineItem, ...]:
    """
    Extract line items from a document, dropping exact repeats.

    Args:
        document: Normalized document
        default_currency: Currency when a row has no marker
        name_max_length: Cap on item names

    Returns:
        Items in document order
    """
    seen = set()
    items: List[LineItem] = []

    for row in segment_rows(document.lines):
        item = map_row(row, default_currency=default_currency, name_max_length=name_max_length)
        if item is None:
            continue
        key = _dedupe_key(item)
        if key in seen:
            continue
        seen.add(key)
        items.append(item)

    logger.debug("Extracted %d item(s) from %d line(s)", len(items), len(document.lines))
    return tuple(items)
