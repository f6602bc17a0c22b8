"""
Parse API router: bill text or uploaded files → InvoiceRecord.
"""

import logging

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from billparser.config import settings
from billparser.models.invoice import InvoiceRecord
from billparser.services.ocr import OCRService
from billparser.services.parser import InvoiceParser

router = APIRouter(prefix="/parse", tags=["parse"])
logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_TYPES = ["application/pdf", "image/jpeg", "image/jpg", "image/png"]


class ParseRequest(BaseModel):
    """Raw bill text, e.g. pasted OCR output."""
    text: str = ""


@router.post("", response_model=InvoiceRecord)
async def parse_text(request: ParseRequest):
    """
    Parse raw bill text into a structured invoice record.

    Empty text is not an error: the record comes back with confidence 0 and
    a raw/empty issue.
    """
    return InvoiceParser().parse(request.text)


@router.post("/upload", response_model=InvoiceRecord)
async def parse_upload(file: UploadFile = File(...)):
    """
    Upload a bill (PDF, JPG, PNG), run OCR and parse the recovered text.

    Args:
        file: Uploaded file

    Returns:
        Parsed invoice record
    """
    try:
        if file.content_type not in ALLOWED_UPLOAD_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type: {file.content_type}. Allowed: PDF, JPG, PNG"
            )

        file_data = await file.read()
        file_size_mb = len(file_data) / (1024 * 1024)

        if file_size_mb > settings.MAX_UPLOAD_MB:
            raise HTTPException(
                status_code=400,
                detail=f"File too large: {file_size_mb:.2f}MB. Maximum: {settings.MAX_UPLOAD_MB}MB"
            )

        ocr = OCRService()
        text = await run_in_threadpool(
            ocr.extract_text_from_file,
            file_data,
            file.content_type,
            file.filename or "",
        )

        logger.info("Text extracted from upload", extra={
            "file_name": file.filename,
            "mime_type": file.content_type,
            "text_length": len(text),
        })

        return InvoiceParser().parse(text)

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Upload parsing failed", extra={
            "file_name": file.filename,
            "error": str(e)
        })
        raise HTTPException(
            status_code=500,
            detail=f"Failed to parse upload: {str(e)}"
        )
