"""
Text Acquisition Engine.

Turns uploaded document bytes into a plain-text transcript:
- PDFs go through native text extraction (pdfplumber) first. A PDF whose text
  layer is near-empty is a scan, so it is rasterized and OCR'd instead.
- Images are OCR'd directly.

OCR runs Tesseract with English and French models, since BLs carry either
language's labels (CONSIGNEE / DESTINATAIRE).

Errors are not handled here; the orchestrator owns the failure boundary.
"""

import io
import re
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

import pdfplumber
import pytesseract
from pdf2image import convert_from_bytes
from PIL import Image

from blextract.core.config import settings
from blextract.logging_config import get_logger
from blextract.metrics import ocr_fallback_total, text_acquisition_duration_seconds
from blextract.schemas import AcquisitionMethod

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"

if settings.TESSERACT_CMD:
    pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD


class AcquisitionError(Exception):
    """
    Raised when acquisition fails after part of the transcript was obtained.

    `partial_text` carries whatever text was read before the failure, so the
    caller can still hand it to the operator.
    """

    def __init__(self, message: str, partial_text: str = ""):
        super().__init__(message)
        self.partial_text = partial_text


def is_pdf(media_type: str) -> bool:
    return (media_type or "").split(";")[0].strip().lower() == PDF_MEDIA_TYPE


def has_enough_text(text: str, min_chars: Optional[int] = None) -> bool:
    """True when `text` has at least `min_chars` non-whitespace characters."""
    if min_chars is None:
        min_chars = settings.MIN_NATIVE_TEXT_CHARS
    return len(re.sub(r"\s", "", text or "")) >= min_chars


def extract_native_text(file_bytes: bytes) -> str:
    """
    Read the text layer of a PDF, one page after another.

    Args:
        file_bytes: The raw bytes of the PDF file.

    Returns:
        str: Page texts joined by newlines (empty for image-only PDFs).
    """
    with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
        return "\n".join(page.extract_text() or "" for page in pdf.pages)


def _rasterize(file_bytes: bytes, media_type: str) -> List[Image.Image]:
    if is_pdf(media_type):
        return convert_from_bytes(
            file_bytes,
            dpi=settings.OCR_DPI,
            first_page=1,
            last_page=settings.MAX_OCR_PAGES,
        )
    image = Image.open(io.BytesIO(file_bytes))
    image.load()
    return [image]


@contextmanager
def ocr_session(file_bytes: bytes, media_type: str) -> Iterator[List[Image.Image]]:
    """
    Open the page images for one OCR run and close them on every exit path.

    A session belongs to a single request; it is never shared or pooled.
    """
    pages = _rasterize(file_bytes, media_type)
    try:
        yield pages
    finally:
        for page in pages:
            page.close()


def recognize_text(file_bytes: bytes, media_type: str) -> str:
    """
    OCR a document (image, or PDF rendered page by page).

    Returns:
        str: Recognized text of all pages, joined by newlines.
    """
    with ocr_session(file_bytes, media_type) as pages:
        return "\n".join(
            pytesseract.image_to_string(page, lang=settings.OCR_LANGUAGES) or ""
            for page in pages
        )


def _timed(method: AcquisitionMethod, func, *args) -> str:
    start_time = time.time()
    try:
        return func(*args)
    finally:
        text_acquisition_duration_seconds.labels(method=method.value).observe(time.time() - start_time)


def acquire(file_bytes: bytes, media_type: str) -> Tuple[str, AcquisitionMethod]:
    """
    Produce a transcript for a document.

    Args:
        file_bytes: Raw uploaded content.
        media_type: Declared media type (application/pdf, image/jpeg, ...).

    Returns:
        Tuple[str, AcquisitionMethod]: The transcript and the path that produced it.

    Raises:
        AcquisitionError: OCR fallback failed after native text was read.
        Exception: Anything raised by pdfplumber, pdf2image, Pillow or Tesseract.
    """
    if not is_pdf(media_type):
        text = _timed(AcquisitionMethod.OCR, recognize_text, file_bytes, media_type)
        return text, AcquisitionMethod.OCR

    native_text = _timed(AcquisitionMethod.NATIVE_TEXT, extract_native_text, file_bytes)
    if has_enough_text(native_text):
        return native_text, AcquisitionMethod.NATIVE_TEXT

    logger.info(
        "PDF has minimal text, falling back to OCR",
        extra={"extra_fields": {"native_chars": len(native_text.strip())}},
    )
    ocr_fallback_total.inc()
    try:
        text = _timed(AcquisitionMethod.OCR, recognize_text, file_bytes, media_type)
    except Exception as e:
        raise AcquisitionError(f"OCR fallback failed: {e}", partial_text=native_text) from e
    return text, AcquisitionMethod.OCR
