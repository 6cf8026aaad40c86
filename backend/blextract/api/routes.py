from fastapi import APIRouter, File, HTTPException, UploadFile

from blextract.core.config import settings
from blextract.logging_config import get_logger
from blextract.metrics import bl_upload_size_bytes
from blextract.schemas import ExtractionResult
from blextract.services.pipeline import run_extraction_with_timeout

logger = get_logger(__name__)

router = APIRouter()


@router.post("/extract-bl", response_model=ExtractionResult)
async def extract_bill_of_lading(file: UploadFile = File(...)):
    """
    Pre-fill shipment fields from an uploaded Bill of Lading (PDF or image).

    Always answers 200 for an accepted upload; a document that could not be
    analyzed comes back with method "failed" and empty fields so the
    operator can fill them in manually.
    """
    media_type = (file.content_type or "").split(";")[0].strip().lower()
    if media_type not in settings.ALLOWED_MEDIA_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported file type {media_type or 'unknown'}. Allowed: {', '.join(settings.ALLOWED_MEDIA_TYPES)}",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail=f"File {file.filename} is empty.")
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File {file.filename} exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB.",
        )
    bl_upload_size_bytes.labels(media_type=media_type).observe(len(content))

    logger.info(
        "BL upload received",
        extra={"extra_fields": {"upload_filename": file.filename, "media_type": media_type, "size_bytes": len(content)}},
    )
    return await run_extraction_with_timeout(content, media_type)
