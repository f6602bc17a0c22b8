from .invoice import (
    Currency,
    DisplayItem,
    InvoiceDisplay,
    InvoiceRecord,
    Issue,
    LineItem,
    Mismatch,
    MonetaryAmount,
    RawDocument,
)

__all__ = [
    'Currency', 'DisplayItem', 'InvoiceDisplay', 'InvoiceRecord', 'Issue',
    'LineItem', 'Mismatch', 'MonetaryAmount', 'RawDocument',
]
