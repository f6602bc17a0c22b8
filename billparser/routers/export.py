"""
Export API router for downloading a parsed record in file formats.
"""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from billparser.models.invoice import InvoiceRecord
from billparser.services.export import EXPORTERS, export_filename

router = APIRouter(prefix="/export", tags=["export"])
logger = logging.getLogger(__name__)


@router.get("")
async def list_formats():
    """Available export formats."""
    return {
        "formats": [
            {"name": fmt.name, "media_type": fmt.media_type, "extension": fmt.extension}
            for fmt in EXPORTERS.values()
        ]
    }


@router.post("/{fmt}")
async def export_record(fmt: str, record: InvoiceRecord):
    """
    Export an invoice record as a downloadable file.

    Formats: json, txt, tsv, csv, tally (Tally voucher XML), zip

    Returns:
        File download
    """
    export_format = EXPORTERS.get(fmt.lower())
    if export_format is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown export format: {fmt}. Allowed: {', '.join(EXPORTERS)}"
        )

    try:
        content = export_format.render(record)
        if isinstance(content, str):
            content = content.encode('utf-8')

        filename = export_filename(record, export_format.extension)
        logger.info("Record exported", extra={
            "record_id": record.id,
            "format": export_format.name,
            "size": len(content),
        })

        return StreamingResponse(
            iter([content]),
            media_type=export_format.media_type,
            headers={
                "Content-Disposition": f"attachment; filename={filename}"
            }
        )

    except Exception as e:
        logger.error("Export failed", extra={"record_id": record.id, "error": str(e)})
        raise HTTPException(
            status_code=500,
            detail=f"Failed to export {export_format.name}: {str(e)}"
        )
