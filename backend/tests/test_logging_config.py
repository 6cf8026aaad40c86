import json
import logging
import os
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Add the project root to sys.path so we can import blextract
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from blextract.core.config import Settings
from blextract.logging_config import GCPJSONFormatter, RequestLoggingMiddleware, setup_logging


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _record(**extra):
    record = logging.LogRecord("blextract.test", logging.INFO, __file__, 10, "BL upload received", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def access_log():
    handler = ListHandler()
    logger = logging.getLogger("blextract.test.access")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(handler)
    yield logger, handler
    logger.removeHandler(handler)


@pytest.fixture
def client(access_log):
    logger, _ = access_log
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware, logger=logger)

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.post("/extract-bl")
    async def extract():
        return {"method": "ocr"}

    return TestClient(app)


def test_formatter_outputs_gcp_json():
    formatter = GCPJSONFormatter(service_name="bl-extract", project_id="demo-project")
    line = formatter.format(_record(extra_fields={"size_bytes": 1024, "media_type": "image/png"}, trace_id="abc123"))
    entry = json.loads(line)

    assert entry["severity"] == "INFO"
    assert entry["message"] == "BL upload received"
    assert entry["serviceContext"] == {"service": "bl-extract"}
    assert entry["logger"] == "blextract.test"
    assert entry["size_bytes"] == 1024
    assert entry["media_type"] == "image/png"
    assert entry["logging.googleapis.com/trace"] == "projects/demo-project/traces/abc123"


def test_formatter_keeps_trace_id_without_project():
    entry = json.loads(GCPJSONFormatter().format(_record(trace_id="abc123")))

    assert entry["trace_id"] == "abc123"
    assert "logging.googleapis.com/trace" not in entry


def test_formatter_keeps_accents():
    record = _record(extra_fields={"supplier_country": "SÉNÉGAL"})
    assert "SÉNÉGAL" in GCPJSONFormatter().format(record)


def test_setup_logging_quiets_pdf_libraries():
    setup_logging(level=logging.DEBUG)

    assert logging.getLogger("pdfminer").level == logging.WARNING
    assert logging.getLogger("PIL").level == logging.WARNING
    assert logging.getLogger().level == logging.DEBUG

    setup_logging(level=logging.INFO)


def test_access_log_line(client, access_log):
    _, handler = access_log

    client.post(
        "/extract-bl",
        content=b"x" * 100,
        headers={"x-cloud-trace-context": "trace42/1;o=1", "content-type": "application/octet-stream"},
    )

    record = handler.records[-1]
    assert record.levelno == logging.INFO
    assert record.httpRequest["requestMethod"] == "POST"
    assert record.httpRequest["status"] == 200
    assert record.httpRequest["requestSize"] == "100"
    assert record.trace_id == "trace42"


def test_probes_are_logged_at_debug(client, access_log):
    _, handler = access_log

    client.get("/health")

    assert handler.records[-1].levelno == logging.DEBUG


def test_client_errors_are_warnings(client, access_log):
    _, handler = access_log

    client.get("/unknown")

    assert handler.records[-1].levelno == logging.WARNING
    assert handler.records[-1].httpRequest["status"] == 404


def test_cors_origins_setting():
    assert Settings(ALLOWED_ORIGINS="https://a.example, https://b.example,").cors_origins == [
        "https://a.example",
        "https://b.example",
    ]
    assert Settings(ALLOWED_ORIGINS="").cors_origins == []


def test_severity_follows_level_name():
    record = _record()
    record.levelno, record.levelname = logging.WARNING, "WARNING"

    assert json.loads(GCPJSONFormatter().format(record))["severity"] == "WARNING"


def test_request_url_is_the_path(client, access_log):
    _, handler = access_log

    client.get("/health?verbose=1")

    assert handler.records[-1].httpRequest["requestUrl"] == "/health"
