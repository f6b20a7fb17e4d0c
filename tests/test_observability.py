import json
import logging

from fastapi.testclient import TestClient

from clinic.logging_utils import (
    JSONLogFormatter,
    bind_request_id,
    get_request_id,
    reset_request_id,
)
from clinic.main import app


client = TestClient(app)


def test_health_endpoint():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_metrics_endpoint():
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "clinic_api_requests_total" in response.text
    assert response.headers["content-type"].startswith("text/plain")


def test_request_id_is_echoed():
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated_when_missing():
    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_json_formatter_includes_context_and_extra_fields():
    record = logging.LogRecord("clinic", logging.INFO, __file__, 1, "hello %s", ("x",), None)
    record.request_id = "abc"
    record.resource = "patients"

    entry = json.loads(JSONLogFormatter().format(record))

    assert entry["message"] == "hello x"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "abc"
    assert entry["resource"] == "patients"


def test_request_id_context_is_reset():
    token = bind_request_id("req-ctx")
    assert get_request_id() == "req-ctx"
    reset_request_id(token)
    assert get_request_id() == "unknown"
