import asyncio
import functools
import time
from typing import Optional

from blextract.core.config import settings
from blextract.logging_config import get_logger
from blextract.metrics import bl_extraction_total
from blextract.schemas import AcquisitionMethod, ExtractionResult
from blextract.services.field_extractor import empty_bl_data, extract
from blextract.services.text_acquisition import AcquisitionError, acquire

logger = get_logger(__name__)

PREVIEW_CHARS = 200


def failed_result(raw_text: str = "") -> ExtractionResult:
    """All-defaults result for documents that could not be analyzed."""
    return ExtractionResult(data=empty_bl_data(), raw_text=raw_text, method=AcquisitionMethod.FAILED)


def _log_failure(error: Exception, media_type: str, file_bytes: bytes, start_time: float) -> None:
    bl_extraction_total.labels(method=AcquisitionMethod.FAILED.value).inc()
    logger.error(
        "BL extraction failed",
        extra={"extra_fields": {
            "media_type": media_type,
            "size_bytes": len(file_bytes or b""),
            "duration_seconds": time.time() - start_time,
            "error": str(error),
            "error_type": type(error).__name__,
        }},
        exc_info=True,
    )


def run_extraction(file_bytes: bytes, media_type: str) -> ExtractionResult:
    """
    Acquire a transcript and extract BL fields from it.

    This never raises: any failure in either stage is logged and mapped to a
    result with method "failed", default data and whatever transcript was
    obtained before the failure.

    Args:
        file_bytes: Raw uploaded document.
        media_type: Declared media type of the upload.

    Returns:
        ExtractionResult: data, raw transcript and acquisition method.
    """
    raw_text = ""
    start_time = time.time()
    try:
        raw_text, method = acquire(file_bytes, media_type)
        logger.info(
            f"BL text extracted via {method.value}",
            extra={"extra_fields": {
                "method": method.value,
                "text_length": len(raw_text),
                "preview": raw_text[:PREVIEW_CHARS],
            }},
        )
        data = extract(raw_text)
    except AcquisitionError as e:
        # OCR fallback broke after the text layer was read
        _log_failure(e, media_type, file_bytes, start_time)
        return failed_result(e.partial_text)
    except Exception as e:
        _log_failure(e, media_type, file_bytes, start_time)
        return failed_result(raw_text)

    bl_extraction_total.labels(method=method.value).inc()
    logger.info(
        "BL fields extracted",
        extra={"extra_fields": {
            "bl_number": data.bl_number,
            "containers": len(data.containers),
            "duration_seconds": time.time() - start_time,
        }},
    )
    return ExtractionResult(data=data, raw_text=raw_text, method=method)


async def run_extraction_with_timeout(
    file_bytes: bytes,
    media_type: str,
    timeout: Optional[float] = None,
) -> ExtractionResult:
    """
    Run the blocking pipeline in a worker thread with an overall deadline.

    The pipeline itself has no cancellation; on timeout the worker thread is
    left to finish in the background and the caller gets a failed result.
    """
    timeout = settings.EXTRACTION_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        loop = asyncio.get_running_loop()
        work = loop.run_in_executor(None, functools.partial(run_extraction, file_bytes, media_type))
        return await asyncio.wait_for(work, timeout)
    except asyncio.TimeoutError:
        bl_extraction_total.labels(method=AcquisitionMethod.FAILED.value).inc()
        logger.error(
            "BL extraction timed out",
            extra={"extra_fields": {"media_type": media_type, "timeout_seconds": timeout}},
        )
        return failed_result()
