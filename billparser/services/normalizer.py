"""
Text normalizer: raw OCR / PDF text → trimmed, non-empty lines.
"""

import re
from typing import Optional, Tuple

from billparser.models.invoice import RawDocument

_RUNS_OF_SPACES = re.compile(r'[ \u00a0]{2,}')


def normalize_text(text: Optional[str]) -> str:
    """
    Remove carriage returns, turn tabs into spaces and collapse space runs.

    Examples:
        >>> normalize_text("  Cafe\\tBlue\\r\\n")
        'Cafe Blue'
    """
    text = (text or '').replace('\r', '').replace('\t', ' ')
    text = _RUNS_OF_SPACES.sub(' ', text)
    return text.strip()


def to_lines(text: Optional[str]) -> Tuple[str, ...]:
    """Split normalized text into trimmed lines, dropping empty ones."""
    return tuple(
        stripped
        for stripped in (line.strip() for line in normalize_text(text).split('\n'))
        if stripped
    )


def build_document(text: Optional[str]) -> RawDocument:
    """Wrap raw text and its lines in an immutable RawDocument."""
    return RawDocument(raw=text or '', lines=to_lines(text))
