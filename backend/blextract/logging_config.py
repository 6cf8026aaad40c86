"""
Structured JSON logging for the BL extraction service.

Every line is a GCP Cloud Logging LogEntry so Cloud Run can ingest stdout
directly. Module-level helpers:
- GCPJSONFormatter: one JSON object per record
- setup_logging(): wires the formatter into root and uvicorn, quiets PDF/OCR libraries
- RequestLoggingMiddleware: one access log line per HTTP request
- get_logger(): per-module logger
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Iterable, Optional

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# pdfminer logs every parsed object at DEBUG
NOISY_LOGGERS = ("pdfminer", "pdfplumber", "PIL", "pytesseract")

# Probes and scrapes, logged at DEBUG only
QUIET_PATHS = ("/health", "/metrics")


class GCPJSONFormatter(logging.Formatter):
    """
    Render a LogRecord as a GCP structured log line.

    Example:
    {
        "severity": "INFO",
        "message": "BL text extracted via ocr",
        "timestamp": "2024-01-15T10:30:00.000000+00:00",
        "serviceContext": {"service": "bl-extract"},
        "logger": "blextract.services.pipeline",
        "method": "ocr", "text_length": 2310
    }

    Keys from `extra={"extra_fields": {...}}` are merged at the top level.
    """

    def __init__(self, service_name: str = "bl-extract", project_id: Optional[str] = None):
        super().__init__()
        self.service_name = service_name
        self.project_id = project_id

    def _trace_fields(self, record: logging.LogRecord) -> dict:
        trace_id = getattr(record, "trace_id", None)
        if not trace_id:
            return {}
        if self.project_id:
            return {"logging.googleapis.com/trace": f"projects/{self.project_id}/traces/{trace_id}"}
        return {"trace_id": trace_id}

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            # Python level names are valid LogSeverity values
            "severity": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "serviceContext": {"service": self.service_name},
            "logger": record.name,
            "logging.googleapis.com/sourceLocation": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }
        entry.update(self._trace_fields(record))

        http_request = getattr(record, "httpRequest", None)
        if http_request:
            entry["httpRequest"] = http_request

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            entry.update(extra_fields)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(
    service_name: str = "bl-extract",
    level: int = logging.INFO,
    project_id: Optional[str] = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Send all logs to stdout as GCP JSON.

    Args:
        service_name: Reported in serviceContext.service
        level: Root log level
        project_id: GCP project ID, enables trace correlation
        quiet_loggers: Third-party loggers capped at WARNING
    """
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(GCPJSONFormatter(service_name=service_name, project_id=project_id))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers[:] = [handler]
        uvicorn_logger.propagate = False

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


class RequestLoggingMiddleware:
    """
    ASGI middleware writing one access log line per HTTP request.

    The record carries a GCP `httpRequest` block (method, URL, status,
    latency, request size from Content-Length) and the trace ID from
    X-Cloud-Trace-Context.
    """

    def __init__(self, app, logger: logging.Logger, quiet_paths: Iterable[str] = QUIET_PATHS):
        self.app = app
        self.logger = logger
        self.quiet_paths = tuple(quiet_paths)

    def _level(self, path: str, status_code: int) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400:
            return logging.WARNING
        if path in self.quiet_paths:
            return logging.DEBUG
        return logging.INFO

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        headers = dict(scope.get("headers", []))
        # TRACE_ID/SPAN_ID;o=TRACE_TRUE
        trace_header = headers.get(b"x-cloud-trace-context", b"").decode("latin-1")
        trace_id = trace_header.split("/")[0] or None
        request_size = headers.get(b"content-length", b"").decode("latin-1")

        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            latency = time.perf_counter() - start_time
            path = scope.get("path", "/")
            method = scope.get("method", "UNKNOWN")

            http_request = {
                "requestMethod": method,
                "requestUrl": path,
                "status": status_code,
                "latency": f"{latency:.3f}s",
            }
            if request_size.isdigit():
                http_request["requestSize"] = request_size

            extra = {"httpRequest": http_request}
            if trace_id:
                extra["trace_id"] = trace_id

            self.logger.log(
                self._level(path, status_code),
                f"{method} {path} {status_code} {latency * 1000:.0f}ms",
                extra=extra,
            )


def get_logger(name: str) -> logging.Logger:
    """
    Module logger. Pass structured context through extra_fields:

        logger = get_logger(__name__)
        logger.info("BL upload received", extra={"extra_fields": {"size_bytes": 48213}})
    """
    return logging.getLogger(name)
