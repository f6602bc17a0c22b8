"""
Reconciler: cross-checks the declared total against the items and scores
how completely the record was reconstructed.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from billparser.models.invoice import Currency, Issue, LineItem, Mismatch, MonetaryAmount
from billparser.utils.money import round_half_up

logger = logging.getLogger(__name__)

# Totals may differ from the item sum by up to this much before flagging
MISMATCH_MIN_UNITS = 200
MISMATCH_RATIO = Decimal('0.05')

# Confidence weights
BASE_SCORE = 10
MERCHANT_SCORE = 20
DATE_SCORE = 15
TOTAL_SCORE = 30
PER_ITEM_SCORE = 5
MAX_ITEMS_SCORE = 25
MISMATCH_PENALTY = 20
MISMATCH_FLOOR = 30


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of cross-checking extracted fields."""
    total: Optional[MonetaryAmount]
    items_total: int
    mismatch: Optional[Mismatch]
    issues: Tuple[Issue, ...]
    confidence: int


def sum_items(items: Sequence[LineItem]) -> int:
    return sum(item.total.minor_units for item in items if item.total is not None)


def detect_mismatch(declared: int, items_total: int) -> Optional[Mismatch]:
    """
    Flag a declared total that strays from the item sum.

    The tolerance is the larger of 200 minor units and 5% of the declared
    total. No check is made when the items sum to nothing.
    """
    if items_total <= 0:
        return None
    tolerance = max(MISMATCH_MIN_UNITS, round_half_up(declared * MISMATCH_RATIO))
    if abs(declared - items_total) > tolerance:
        return Mismatch(declared_total=declared, items_total=items_total)
    return None


def collect_issues(
    merchant: Optional[str],
    date_found: bool,
    total_found: bool,
    item_count: int,
    unknown_merchant: str = 'UNKNOWN'
) -> Tuple[Issue, ...]:
    issues = []
    if not merchant or merchant == unknown_merchant:
        issues.append(Issue(field='merchant', problem='missing'))
    if not date_found:
        issues.append(Issue(field='date', problem='missing'))
    if not total_found:
        issues.append(Issue(field='total', problem='missing'))
    if item_count == 0:
        issues.append(Issue(field='items', problem='no_items'))
    return tuple(issues)


def score_confidence(
    merchant_found: bool,
    date_found: bool,
    total_found: bool,
    item_count: int,
    has_mismatch: bool
) -> int:
    """
    Heuristic 0-100 completeness score.

    Scoring:
    - Base: 10
    - Merchant: +20, date: +15, total: +30
    - Items: +5 each, at most +25
    - Mismatch: -20, but never below 30
    """
    score = BASE_SCORE
    if merchant_found:
        score += MERCHANT_SCORE
    if date_found:
        score += DATE_SCORE
    if total_found:
        score += TOTAL_SCORE
    score += min(MAX_ITEMS_SCORE, item_count * PER_ITEM_SCORE)

    if has_mismatch:
        score = max(MISMATCH_FLOOR, score - MISMATCH_PENALTY)

    return max(0, min(100, score))


def reconcile(
    merchant: Optional[str],
    date_found: bool,
    total: Optional[MonetaryAmount],
    items: Sequence[LineItem],
    currency: Currency = Currency.INR,
    unknown_merchant: str = 'UNKNOWN'
) -> Reconciliation:
    """
    Cross-check extracted fields and derive issues and confidence.

    Args:
        merchant: Extracted merchant name
        date_found: Whether a date was extracted
        total: Declared total, if any
        items: Extracted items
        currency: Currency for a total inferred from the items
        unknown_merchant: Sentinel meaning no merchant was found

    Returns:
        Reconciliation with the (possibly inferred) total
    """
    items_total = sum_items(items)

    if total is None and items_total > 0:
        total = MonetaryAmount(minor_units=items_total, currency=currency, inferred=True)
        logger.debug("Total inferred from %d item(s): %d", len(items), items_total)

    mismatch = None
    if total is not None:
        mismatch = detect_mismatch(total.minor_units, items_total)
        if mismatch is not None:
            logger.debug("Total mismatch: declared %d, items %d", mismatch.declared_total, mismatch.items_total)

    merchant_found = bool(merchant) and merchant != unknown_merchant
    issues = collect_issues(merchant, date_found, total is not None, len(items), unknown_merchant)
    confidence = score_confidence(
        merchant_found=merchant_found,
        date_found=date_found,
        total_found=total is not None,
        item_count=len(items),
        has_mismatch=mismatch is not None,
    )

    return Reconciliation(
        total=total,
        items_total=items_total,
        mismatch=mismatch,
        issues=issues,
        confidence=confidence,
    )
