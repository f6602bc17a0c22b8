"""
Invoice parser service: raw bill text → InvoiceRecord.

The parser is pure. It performs no I/O, keeps no state between calls and
never raises for malformed documents; missing fields surface as issues and
a lower confidence instead.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from billparser.config import settings
from billparser.models.invoice import (
    Currency,
    DisplayItem,
    InvoiceDisplay,
    InvoiceRecord,
    Issue,
    LineItem,
    MonetaryAmount,
)
from billparser.services.extractors import (
    UNKNOWN_MERCHANT,
    extract_date,
    extract_merchant,
    extract_total,
)
from billparser.services.items import extract_items
from billparser.services.normalizer import build_document
from billparser.services.reconciler import reconcile
from billparser.utils.currency import detect_currency
from billparser.utils.money import format_minor_units
from billparser.utils.strategies import TOTAL_SELECTORS

logger = logging.getLogger(__name__)


def generate_record_id() -> str:
    """Time-ordered id, unique within a process."""
    return f"bill-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def _format_amount(amount: Optional[MonetaryAmount]) -> str:
    if amount is None:
        return '-'
    return format_minor_units(amount.minor_units, amount.currency)


def build_display(
    merchant: Optional[str],
    date_text: Optional[str],
    total: Optional[MonetaryAmount],
    items: Sequence[LineItem]
) -> InvoiceDisplay:
    """Human-formatted projection of the record; absent values become '-'."""
    return InvoiceDisplay(
        merchant=merchant or '-',
        date=date_text or '-',
        total=_format_amount(total),
        items=tuple(
            DisplayItem(
                name=item.name or '-',
                quantity=item.quantity or 1,
                price=_format_amount(item.unit_price),
                total=_format_amount(item.total),
            )
            for item in items
        ),
    )


class InvoiceParser:
    """Service for parsing bill text and extracting structured data."""

    def __init__(
        self,
        default_currency: Optional[str] = None,
        merchant_scan_lines: Optional[int] = None,
        total_tail_lines: Optional[int] = None,
        item_name_max_length: Optional[int] = None,
        total_selection: Optional[str] = None,
    ):
        """
        Initialize parser, taking unspecified options from settings.

        Args:
            default_currency: Currency when the text carries no marker
            merchant_scan_lines: Leading lines searched for the merchant
            total_tail_lines: Trailing lines searched for the total
            item_name_max_length: Cap on item names
            total_selection: 'max' or 'last' total candidate
        """
        self.default_currency = Currency(default_currency or settings.DEFAULT_CURRENCY)
        self.merchant_scan_lines = (
            merchant_scan_lines if merchant_scan_lines is not None else settings.MERCHANT_SCAN_LINES
        )
        self.total_tail_lines = total_tail_lines if total_tail_lines is not None else settings.TOTAL_TAIL_LINES
        self.item_name_max_length = (
            item_name_max_length if item_name_max_length is not None else settings.ITEM_NAME_MAX_LENGTH
        )

        selection = total_selection or settings.TOTAL_SELECTION
        if selection not in TOTAL_SELECTORS:
            raise ValueError(f"Unknown total selection: {selection}")
        self.total_selector = TOTAL_SELECTORS[selection]

    def parse(self, text: Optional[str]) -> InvoiceRecord:
        """
        Parse bill text and extract all available fields.

        Args:
            text: OCR or PDF-extracted text

        Returns:
            InvoiceRecord; empty input yields a zero-confidence record with a
            single raw/empty issue
        """
        document = build_document(text)
        record_id = generate_record_id()
        created_at = datetime.now(timezone.utc)

        if document.is_empty:
            logger.info("Empty bill text", extra={"record_id": record_id})
            return InvoiceRecord(
                id=record_id,
                raw=document.raw,
                issues=(Issue(field='raw', problem='empty'),),
                confidence=0,
                created_at=created_at,
                display=InvoiceDisplay(),
            )

        merchant = extract_merchant(document, scan_lines=self.merchant_scan_lines)
        bill_date = extract_date(document)
        total = extract_total(
            document,
            tail_lines=self.total_tail_lines,
            selector=self.total_selector,
            default_currency=self.default_currency,
        )
        items = extract_items(
            document,
            default_currency=self.default_currency,
            name_max_length=self.item_name_max_length,
        )

        reconciliation = reconcile(
            merchant=merchant,
            date_found=bill_date is not None,
            total=total,
            items=items,
            currency=detect_currency(document.raw, default=self.default_currency),
            unknown_merchant=UNKNOWN_MERCHANT,
        )

        record = InvoiceRecord(
            id=record_id,
            merchant=merchant,
            date=bill_date,
            total=reconciliation.total,
            items=items,
            raw=document.raw,
            issues=reconciliation.issues,
            mismatch=reconciliation.mismatch,
            confidence=reconciliation.confidence,
            created_at=created_at,
            display=build_display(
                merchant,
                bill_date.isoformat() if bill_date else None,
                reconciliation.total,
                items,
            ),
        )

        logger.info("Bill parsed", extra={
            "record_id": record.id,
            "merchant": record.merchant,
            "item_count": len(record.items),
            "confidence": record.confidence,
            "issues": [f"{issue.field}:{issue.problem}" for issue in record.issues],
        })
        return record


def parse(text: Optional[str]) -> InvoiceRecord:
    """Parse bill text with settings-derived defaults."""
    return InvoiceParser().parse(text)
