import asyncio
import os
import sys
import time
from pathlib import Path

import pytest

# Add the project root to sys.path so we can import blextract
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from blextract.schemas import AcquisitionMethod
from blextract.services import pipeline
from blextract.services.field_extractor import empty_bl_data
from blextract.services.text_acquisition import AcquisitionError

SAMPLE_TEXT = (Path(__file__).resolve().parent / 'fixtures' / 'sample_bl.txt').read_text(encoding='utf-8')


def test_successful_run(monkeypatch):
    monkeypatch.setattr(pipeline, "acquire", lambda b, media_type: (SAMPLE_TEXT, AcquisitionMethod.NATIVE_TEXT))

    result = pipeline.run_extraction(b"%PDF-1.7", "application/pdf")

    assert result.method == "native-text"
    assert result.raw_text == SAMPLE_TEXT
    assert result.data.bl_number == "MEDU8811223"
    assert len(result.data.containers) == 2


def test_ocr_method_is_reported(monkeypatch):
    monkeypatch.setattr(pipeline, "acquire", lambda b, media_type: ("VESSEL: MSC AURORA\n", AcquisitionMethod.OCR))

    result = pipeline.run_extraction(b"\xff\xd8", "image/jpeg")

    assert result.method == "ocr"
    assert result.data.vessel_name == "MSC AURORA"


def test_acquisition_failure_gives_failed_result(monkeypatch):
    def broken(file_bytes, media_type):
        raise RuntimeError("corrupted PDF")

    monkeypatch.setattr(pipeline, "acquire", broken)

    result = pipeline.run_extraction(b"garbage", "application/pdf")

    assert result.method == "failed"
    assert result.raw_text == ""
    assert result.data == empty_bl_data()


def test_partial_transcript_is_kept_on_failure(monkeypatch):
    def broken(file_bytes, media_type):
        raise AcquisitionError("OCR fallback failed", partial_text="B/L No: MEDU1234567")

    monkeypatch.setattr(pipeline, "acquire", broken)

    result = pipeline.run_extraction(b"%PDF-1.7", "application/pdf")

    assert result.method == "failed"
    assert result.raw_text == "B/L No: MEDU1234567"
    assert result.data == empty_bl_data()


def test_extraction_failure_keeps_transcript(monkeypatch):
    def broken_extract(transcript):
        raise ValueError("unexpected")

    monkeypatch.setattr(pipeline, "acquire", lambda b, media_type: ("SOME TEXT", AcquisitionMethod.NATIVE_TEXT))
    monkeypatch.setattr(pipeline, "extract", broken_extract)

    result = pipeline.run_extraction(b"%PDF-1.7", "application/pdf")

    assert result.method == "failed"
    assert result.raw_text == "SOME TEXT"
    assert result.data.cif_currency == "USD"


def test_timeout_gives_failed_result(monkeypatch):
    def slow(file_bytes, media_type):
        time.sleep(0.5)
        return SAMPLE_TEXT, AcquisitionMethod.NATIVE_TEXT

    monkeypatch.setattr(pipeline, "acquire", slow)

    result = asyncio.run(pipeline.run_extraction_with_timeout(b"%PDF-1.7", "application/pdf", timeout=0.05))

    assert result.method == "failed"
    assert result.data == empty_bl_data()


def test_within_timeout(monkeypatch):
    monkeypatch.setattr(pipeline, "acquire", lambda b, media_type: (SAMPLE_TEXT, AcquisitionMethod.NATIVE_TEXT))

    result = asyncio.run(pipeline.run_extraction_with_timeout(b"%PDF-1.7", "application/pdf", timeout=5))

    assert result.method == "native-text"
    assert result.data.vessel_name == "MSC AURORA"


@pytest.mark.parametrize("media_type", ["application/pdf", "image/png"])
def test_never_raises(monkeypatch, media_type):
    def broken(file_bytes, media_type):
        raise KeyError("pages")

    monkeypatch.setattr(pipeline, "acquire", broken)

    assert pipeline.run_extraction(b"", media_type) == pipeline.failed_result()
