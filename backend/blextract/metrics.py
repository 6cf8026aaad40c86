"""
Prometheus metrics for the BL extraction service.

Served by GET /metrics next to the HTTP metrics of
prometheus-fastapi-instrumentator, scraped by Cloud Run into Cloud Monitoring.

- bl_extraction_total: pipeline outcomes by acquisition method
- text_acquisition_duration_seconds: native text vs OCR latency
- ocr_fallback_total: scanned PDFs sent to OCR
- bl_upload_size_bytes: accepted upload sizes by media type
- app_errors_total: unhandled errors by endpoint
"""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# One increment per pipeline run, labelled with the method that produced the
# transcript; timeouts and errors count as "failed"
bl_extraction_total = Counter(
    "bl_extraction_total",
    "Bill of Lading extractions by acquisition method",
    ["method"],  # native-text, ocr, failed
)

# A 300 DPI page takes seconds in Tesseract, a text layer is sub-second
text_acquisition_duration_seconds = Histogram(
    "text_acquisition_duration_seconds",
    "Time spent turning a document into a transcript in seconds",
    ["method"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0, 120.0],
)

ocr_fallback_total = Counter(
    "ocr_fallback_total",
    "PDFs re-run through OCR because their text layer was near-empty",
)

# Phone photos cluster at 1-5 MB, digital PDFs well under 1 MB
bl_upload_size_bytes = Histogram(
    "bl_upload_size_bytes",
    "Size of accepted BL uploads in bytes",
    ["media_type"],
    buckets=[50_000, 200_000, 500_000, 1_000_000, 2_000_000, 5_000_000, 10_000_000, 15_000_000],
)

app_errors_total = Counter(
    "app_errors_total",
    "Unhandled application errors by endpoint and type",
    ["endpoint", "error_type"],
)


def get_metrics() -> bytes:
    """Current state of the default registry in Prometheus text format."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
