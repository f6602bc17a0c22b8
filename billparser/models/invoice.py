"""
Pydantic models for parsed invoices.

Every model is frozen: a record is built once by the parser and never
mutated afterwards. Amounts are integer minor units (paise, cents).
"""

import datetime
from enum import Enum
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Currency(str, Enum):
    """Currencies the detector can recognise."""
    INR = "INR"
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"


IssueField = Literal["merchant", "date", "total", "items", "raw"]
IssueProblem = Literal["missing", "empty", "no_items"]


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class RawDocument(FrozenModel):
    """Input text plus its normalized, non-empty lines."""
    raw: str
    lines: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines


class MonetaryAmount(FrozenModel):
    """A whole number of minor currency units."""
    minor_units: int
    currency: Currency = Currency.INR
    inferred: bool = False


class LineItem(FrozenModel):
    """A single product/service row."""
    name: str
    quantity: int = Field(1, ge=1)
    unit_price: Optional[MonetaryAmount] = None
    total: Optional[MonetaryAmount] = None
    currency: Currency = Currency.INR


class Issue(FrozenModel):
    """A data-quality problem found while parsing."""
    field: IssueField
    problem: IssueProblem


class Mismatch(FrozenModel):
    """Declared total disagrees with the sum of item totals."""
    declared_total: int
    items_total: int


class DisplayItem(FrozenModel):
    name: str
    quantity: int
    price: str
    total: str


class InvoiceDisplay(FrozenModel):
    """Human-formatted projection consumed by UIs and exporters."""
    merchant: str = "-"
    date: str = "-"
    total: str = "-"
    items: Tuple[DisplayItem, ...] = ()


class InvoiceRecord(FrozenModel):
    """Structured invoice reconstructed from raw text."""
    id: str
    merchant: Optional[str] = None
    date: Optional[datetime.date] = None
    total: Optional[MonetaryAmount] = None
    items: Tuple[LineItem, ...] = ()
    raw: str = ""
    issues: Tuple[Issue, ...] = ()
    mismatch: Optional[Mismatch] = None
    confidence: int = Field(0, ge=0, le=100)
    created_at: datetime.datetime
    display: InvoiceDisplay = InvoiceDisplay()
