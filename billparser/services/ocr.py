"""
OCR service for extracting raw text from bill images and PDFs.

Upstream of the parser: whatever happens here, callers receive a string
(possibly empty) and never an exception.
"""

import io
import logging

import PyPDF2
import pytesseract
from PIL import Image, ImageEnhance
from pdf2image import convert_from_bytes

from billparser.config import settings

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = 'application/pdf'
IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tif', '.tiff', '.webp')

# PDFs whose text layer is shorter than this are treated as scanned images
MIN_PDF_TEXT_LENGTH = 50

TESSERACT_CONFIG = r'--oem 3 --psm 6'


class OCRService:
    """Service for extracting text from bill files."""

    def __init__(self, max_pdf_pages: int = None):
        """Initialize OCR service with Tesseract configuration."""
        pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD
        self.max_pdf_pages = max_pdf_pages or settings.MAX_PDF_PAGES

    def extract_text_from_image(self, image_data: bytes) -> str:
        """
        Extract text from an image using Tesseract OCR.

        Args:
            image_data: Raw image bytes (JPEG, PNG, etc.)

        Returns:
            Extracted text, or "" on failure
        """
        try:
            image = Image.open(io.BytesIO(image_data))
            image = self._preprocess_image(image)
            text = pytesseract.image_to_string(image, config=TESSERACT_CONFIG)
            return text.strip()

        except Exception:
            logger.warning("Error extracting text from image", exc_info=True)
            return ""

    def extract_text_from_pdf(self, pdf_data: bytes) -> str:
        """
        Extract text from a PDF file.
        First tries the embedded text layer, then falls back to OCR.

        Args:
            pdf_data: Raw PDF bytes

        Returns:
            Extracted text, or "" on failure
        """
        text = self._extract_pdf_text_direct(pdf_data)

        if len(text.strip()) < MIN_PDF_TEXT_LENGTH:
            logger.info("PDF text layer too short, using OCR", extra={
                "text_length": len(text.strip())
            })
            text = self._extract_pdf_text_ocr(pdf_data)

        return text.strip()

    def _extract_pdf_text_direct(self, pdf_data: bytes) -> str:
        """Read the PDF's embedded text layer, one line block per page."""
        try:
            pdf_reader = PyPDF2.PdfReader(io.BytesIO(pdf_data))

            text = ""
            for page in pdf_reader.pages[:self.max_pdf_pages]:
                text += (page.extract_text() or "") + "\n"

            return text

        except Exception:
            logger.warning("Error in direct PDF text extraction", exc_info=True)
            return ""

    def _extract_pdf_text_ocr(self, pdf_data: bytes) -> str:
        """Rasterize PDF pages and OCR each one."""
        try:
            images = convert_from_bytes(pdf_data, first_page=1, last_page=self.max_pdf_pages)

            text = ""
            for image in images:
                image = self._preprocess_image(image)
                text += pytesseract.image_to_string(image, config=TESSERACT_CONFIG) + "\n"

            return text

        except Exception:
            logger.warning("Error in OCR-based PDF text extraction", exc_info=True)
            return ""

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess image to improve OCR accuracy.

        Grayscale plus a contrast boost, which helps with faded thermal
        receipts.
        """
        try:
            if image.mode != 'RGB':
                image = image.convert('RGB')
            image = image.convert('L')
            return ImageEnhance.Contrast(image).enhance(2.0)

        except Exception:
            logger.warning("Error preprocessing image", exc_info=True)
            return image

    def extract_text_from_file(
        self,
        file_data: bytes,
        mime_type: str,
        filename: str = ""
    ) -> str:
        """
        Extract text from a file (auto-detects format).

        Args:
            file_data: Raw file bytes
            mime_type: MIME type of the file
            filename: Optional filename for extension detection

        Returns:
            Extracted text; "" for unsupported types
        """
        mime_type = mime_type or ""
        is_pdf = mime_type == PDF_MIME_TYPE or filename.lower().endswith('.pdf')
        is_image = mime_type.startswith('image/') or filename.lower().endswith(IMAGE_EXTENSIONS)

        if is_pdf:
            return self.extract_text_from_pdf(file_data)
        if is_image:
            return self.extract_text_from_image(file_data)

        logger.warning("Unsupported file type", extra={"mime_type": mime_type, "file_name": filename})
        return ""
