"""
Export service: serialize an InvoiceRecord to downstream file formats.

Formats:
- json:  full record
- txt:   raw bill text
- tsv:   display items, tab separated
- csv:   display items, comma separated (quoted by the csv module)
- tally: Tally voucher XML for accounting import
- zip:   bundle of json, txt, tsv and tally
"""

import csv
import io
import re
import zipfile
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union
from xml.sax.saxutils import escape

from billparser.models.invoice import InvoiceRecord, MonetaryAmount

ITEM_COLUMNS = ['Name', 'Qty', 'Price', 'Total']
NO_RAW_TEXT = 'No raw OCR text available.'

_UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9_-]+')


def export_filename(record: InvoiceRecord, extension: str) -> str:
    """
    Build a download filename from the merchant and creation time.

    Examples:
        >>> export_filename(record, 'tsv')
        'Cafe_Blue_1709800000000.tsv'
    """
    base = _UNSAFE_FILENAME_CHARS.sub('_', record.merchant or '').strip('_') or 'invoice'
    timestamp = int(record.created_at.timestamp() * 1000)
    return f"{base}_{timestamp}.{extension}"


def _plain_amount(amount: Optional[MonetaryAmount]) -> str:
    """Minor units as an unformatted decimal string, e.g. 123456 → '1234.56'."""
    if amount is None:
        return '0.00'
    sign = '-' if amount.minor_units < 0 else ''
    major, minor = divmod(abs(amount.minor_units), 100)
    return f"{sign}{major}.{minor:02d}"


def to_json(record: InvoiceRecord) -> str:
    return record.model_dump_json(indent=2)


def to_text(record: InvoiceRecord) -> str:
    return record.raw or NO_RAW_TEXT


def to_tsv(record: InvoiceRecord) -> str:
    """Item table with a Name/Qty/Price/Total header, one row per item."""
    rows = ['\t'.join(ITEM_COLUMNS)]
    for item in record.display.items:
        rows.append(f"{item.name}\t{item.quantity}\t{item.price}\t{item.total}")
    return '\n'.join(rows) + '\n'


def to_csv(record: InvoiceRecord) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(ITEM_COLUMNS)
    for item in record.display.items:
        writer.writerow([item.name, item.quantity, item.price, item.total])
    return output.getvalue()


def to_tally_xml(record: InvoiceRecord) -> str:
    """
    Render a Tally sales voucher.

    The voucher date falls back to the record's creation date when the bill
    date is unknown; item ledgers use plain decimal amounts.
    """
    voucher_date = (record.date or record.created_at.date()).strftime('%Y%m%d')
    party = escape(record.display.merchant if record.display.merchant != '-' else 'Merchant')

    ledgers = []
    for index, item in enumerate(record.items, start=1):
        name = escape(item.name if item.name and item.name != '-' else f"Item{index}")
        ledgers.append(
            "      <LEDGER>\n"
            f"        <NAME>{name}</NAME>\n"
            f"        <AMOUNT>{_plain_amount(item.total)}</AMOUNT>\n"
            "      </LEDGER>"
        )

    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<TALLYMESSAGE>',
        '  <VOUCHER>',
        f'    <DATE>{voucher_date}</DATE>',
        '    <VOUCHERTYPENAME>Sales</VOUCHERTYPENAME>',
        f'    <PARTYNAME>{party}</PARTYNAME>',
        f'    <AMOUNT>{_plain_amount(record.total)}</AMOUNT>',
        '    <ALLLEDGERS>',
        *ledgers,
        '    </ALLLEDGERS>',
        '  </VOUCHER>',
        '</TALLYMESSAGE>',
    ]
    return '\n'.join(lines) + '\n'


def to_zip(record: InvoiceRecord) -> bytes:
    """Bundle the json, txt, tsv and Tally exports into one archive."""
    base = export_filename(record, 'zip')[:-len('.zip')]
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(f"{base}.json", to_json(record))
        archive.writestr(f"{base}.txt", to_text(record))
        archive.writestr(f"{base}.tsv", to_tsv(record))
        archive.writestr(f"{base}.tally.xml", to_tally_xml(record))
    return buffer.getvalue()


@dataclass(frozen=True)
class ExportFormat:
    """An export target: renderer, media type and file extension."""
    name: str
    render: Callable[[InvoiceRecord], Union[str, bytes]]
    media_type: str
    extension: str


EXPORTERS: Dict[str, ExportFormat] = {
    fmt.name: fmt for fmt in (
        ExportFormat('json', to_json, 'application/json', 'json'),
        ExportFormat('txt', to_text, 'text/plain', 'txt'),
        ExportFormat('tsv', to_tsv, 'text/tab-separated-values', 'tsv'),
        ExportFormat('csv', to_csv, 'text/csv', 'csv'),
        ExportFormat('tally', to_tally_xml, 'application/xml', 'tally.xml'),
        ExportFormat('zip', to_zip, 'application/zip', 'zip'),
    )
}
