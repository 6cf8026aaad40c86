import logging

import pytesseract
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from blextract.api.routes import router
from blextract.core.config import settings
from blextract.logging_config import QUIET_PATHS, RequestLoggingMiddleware, get_logger, setup_logging
from blextract.metrics import app_errors_total, get_metrics, get_metrics_content_type

setup_logging(
    service_name=settings.SERVICE_NAME,
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    project_id=settings.GCP_PROJECT_ID,
)
logger = get_logger(__name__)

app = FastAPI(title="Bill of Lading Extraction API")

LOCAL_ORIGINS = [
    "http://localhost:5173",  # Vite dev server
    "http://localhost:8080",  # Local Docker
    "http://localhost",
    "http://127.0.0.1",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=LOCAL_ORIGINS + settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Inside CORS, so preflight answers are not logged
app.add_middleware(RequestLoggingMiddleware, logger=logger)

app.include_router(router)

Instrumentator(
    should_group_status_codes=False,
    should_ignore_untemplated=True,
    excluded_handlers=list(QUIET_PATHS),
).instrument(app)


@app.on_event("startup")
async def log_ocr_setup():
    """Report the OCR configuration, warn early when Tesseract is missing."""
    try:
        tesseract_version = str(pytesseract.get_tesseract_version())
    except pytesseract.TesseractNotFoundError:
        tesseract_version = None
        logger.warning("Tesseract binary not found, image uploads and scanned PDFs will fail")

    logger.info(
        "Service started",
        extra={"extra_fields": {
            "event": "startup",
            "tesseract_version": tesseract_version,
            "ocr_languages": settings.OCR_LANGUAGES,
            "max_upload_bytes": settings.MAX_UPLOAD_BYTES,
        }},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    app_errors_total.labels(endpoint=request.url.path, error_type=type(exc).__name__).inc()
    logger.error(
        f"Unhandled exception: {exc}",
        extra={"extra_fields": {
            "endpoint": request.url.path,
            "error_type": type(exc).__name__,
            "method": request.method,
        }},
        exc_info=True,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health_check():
    """Liveness probe for Cloud Run."""
    return {"status": "healthy", "service": settings.SERVICE_NAME}


@app.get("/metrics")
async def metrics():
    """
    Prometheus scrape endpoint. Besides the HTTP metrics from the
    instrumentator it serves:
    - bl_extraction_total{method}: pipeline runs by acquisition path
    - text_acquisition_duration_seconds{method}: native text vs OCR latency
    - ocr_fallback_total: scanned PDFs re-run through OCR
    - bl_upload_size_bytes{media_type}, app_errors_total
    """
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


if __name__ == "__main__":
    uvicorn.run("blextract.main:app", host="0.0.0.0", port=settings.PORT)
