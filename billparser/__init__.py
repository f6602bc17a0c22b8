"""
billparser - reconstruct structured invoices from noisy OCR text.
"""

from billparser.models.invoice import InvoiceRecord
from billparser.services.parser import InvoiceParser, parse

__version__ = "0.1.0"

__all__ = ['InvoiceParser', 'InvoiceRecord', 'parse', '__version__']
