import io
import os
import sys

import pytest
from PIL import Image
from prometheus_client import REGISTRY

# Add the project root to sys.path so we can import blextract
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from blextract.core.config import settings
from blextract.schemas import AcquisitionMethod
from blextract.services import text_acquisition
from blextract.services.text_acquisition import (
    AcquisitionError,
    acquire,
    extract_native_text,
    has_enough_text,
    is_pdf,
    ocr_session,
    recognize_text,
)

NATIVE_TEXT = "BILL OF LADING\nB/L No: MEDU8811223\nVESSEL: MSC AURORA\nPORT OF DISCHARGE: CONAKRY\n"


class FakePage:
    def __init__(self, name):
        self.name = name
        self.closed = False

    def close(self):
        self.closed = True


def _fail(*args, **kwargs):
    raise AssertionError("should not be called")


def _image_bytes(fmt):
    buffer = io.BytesIO()
    Image.new("RGB", (200, 100), "white").save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def fake_pages(monkeypatch):
    pages = [FakePage("page-1"), FakePage("page-2")]
    monkeypatch.setattr(text_acquisition, "_rasterize", lambda file_bytes, media_type: pages)
    return pages


def test_is_pdf():
    assert is_pdf("application/pdf")
    assert is_pdf("Application/PDF; charset=binary")
    assert not is_pdf("image/png")
    assert not is_pdf(None)


def test_has_enough_text_ignores_whitespace():
    assert has_enough_text("x" * 50)
    assert not has_enough_text(" \n\t " * 100)
    assert not has_enough_text("abc", min_chars=4)
    assert has_enough_text("a b c d", min_chars=4)


def test_text_pdf_uses_native_text(monkeypatch):
    monkeypatch.setattr(text_acquisition, "extract_native_text", lambda b: NATIVE_TEXT)
    monkeypatch.setattr(text_acquisition, "recognize_text", _fail)

    text, method = acquire(b"%PDF-1.7", "application/pdf")

    assert text == NATIVE_TEXT
    assert method == AcquisitionMethod.NATIVE_TEXT


def test_whitespace_pdf_falls_back_to_ocr(monkeypatch):
    monkeypatch.setattr(text_acquisition, "extract_native_text", lambda b: "  \n \n   ")
    monkeypatch.setattr(text_acquisition, "recognize_text", lambda b, media_type: "OCR TRANSCRIPT")
    before = REGISTRY.get_sample_value("ocr_fallback_total") or 0

    text, method = acquire(b"%PDF-1.7", "application/pdf")

    assert text == "OCR TRANSCRIPT"
    assert method == AcquisitionMethod.OCR
    assert REGISTRY.get_sample_value("ocr_fallback_total") == before + 1


def test_image_goes_straight_to_ocr(monkeypatch):
    monkeypatch.setattr(text_acquisition, "extract_native_text", _fail)
    monkeypatch.setattr(text_acquisition, "recognize_text", lambda b, media_type: "OCR TRANSCRIPT")

    text, method = acquire(b"\x89PNG", "image/png")

    assert text == "OCR TRANSCRIPT"
    assert method == AcquisitionMethod.OCR


def test_failed_ocr_fallback_keeps_native_text(monkeypatch):
    def broken_ocr(file_bytes, media_type):
        raise RuntimeError("tesseract is not installed")

    monkeypatch.setattr(text_acquisition, "extract_native_text", lambda b: "PAGE 1")
    monkeypatch.setattr(text_acquisition, "recognize_text", broken_ocr)

    with pytest.raises(AcquisitionError) as exc_info:
        acquire(b"%PDF-1.7", "application/pdf")

    assert exc_info.value.partial_text == "PAGE 1"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_image_ocr_errors_propagate(monkeypatch):
    def broken_ocr(file_bytes, media_type):
        raise OSError("cannot identify image file")

    monkeypatch.setattr(text_acquisition, "recognize_text", broken_ocr)

    with pytest.raises(OSError):
        acquire(b"not an image", "image/jpeg")


def test_ocr_session_closes_pages(fake_pages):
    with ocr_session(b"...", "application/pdf") as pages:
        assert pages is fake_pages
        assert not any(page.closed for page in pages)

    assert all(page.closed for page in fake_pages)


def test_ocr_session_closes_pages_on_error(fake_pages):
    with pytest.raises(ValueError):
        with ocr_session(b"...", "application/pdf"):
            raise ValueError("boom")

    assert all(page.closed for page in fake_pages)


def test_recognize_text_joins_pages(monkeypatch, fake_pages):
    calls = []

    def fake_tesseract(page, lang=None):
        calls.append((page.name, lang))
        return f"text of {page.name}"

    monkeypatch.setattr(text_acquisition.pytesseract, "image_to_string", fake_tesseract)

    text = recognize_text(b"...", "application/pdf")

    assert text == "text of page-1\ntext of page-2"
    assert calls == [("page-1", settings.OCR_LANGUAGES), ("page-2", settings.OCR_LANGUAGES)]
    assert all(page.closed for page in fake_pages)


def test_recognize_text_closes_pages_when_tesseract_fails(monkeypatch, fake_pages):
    def broken_tesseract(page, lang=None):
        raise RuntimeError("tesseract crashed")

    monkeypatch.setattr(text_acquisition.pytesseract, "image_to_string", broken_tesseract)

    with pytest.raises(RuntimeError):
        recognize_text(b"...", "application/pdf")

    assert all(page.closed for page in fake_pages)


def test_rasterize_image():
    pages = text_acquisition._rasterize(_image_bytes("PNG"), "image/png")

    assert len(pages) == 1
    assert pages[0].size == (200, 100)
    pages[0].close()


def test_scanned_pdf_has_no_native_text(monkeypatch):
    # Pillow writes an image-only PDF, the same shape as a scanner's output
    pdf_bytes = _image_bytes("PDF")
    monkeypatch.setattr(text_acquisition, "recognize_text", lambda b, media_type: "SCANNED BL")

    assert extract_native_text(pdf_bytes).strip() == ""
    assert acquire(pdf_bytes, "application/pdf") == ("SCANNED BL", AcquisitionMethod.OCR)
