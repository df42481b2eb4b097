"""Tests for request id tagging and security headers."""

from __future__ import annotations

import os
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_sessionbook.db")
os.environ.setdefault("AWS_S3_BUCKET", "local")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/sessionbook-tests")

import pytest
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from app.backend.src.core.middleware import SECURITY_HEADERS
from app.backend.src.db import Base, get_engine
from app.backend.src.main import app


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


def test_every_response_carries_a_request_id(client: TestClient) -> None:
    first = client.get("/api/health/live")
    second = client.get("/api/health/live")

    assert first.status_code == 200
    assert first.headers["X-Request-ID"]
    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]


def test_incoming_request_id_is_echoed(client: TestClient) -> None:
    response = client.get("/api/health/live", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"


def test_request_completion_is_logged_with_request_id(client: TestClient) -> None:
    with capture_logs() as logs:
        response = client.get("/api/health/live", headers={"X-Request-ID": "req-42"})

    completed = [entry for entry in logs if entry["event"] == "request_completed"]
    assert response.status_code == 200
    assert len(completed) == 1
    assert completed[0]["request_id"] == "req-42"
    assert completed[0]["path"] == "/api/health/live"
    assert completed[0]["status"] == 200


def test_security_headers_are_set(client: TestClient) -> None:
    response = client.get("/api/health/live")

    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


def test_error_responses_carry_headers(client: TestClient) -> None:
    response = client.get("/api/clients/9999")

    assert response.status_code == 404
    assert response.headers["X-Request-ID"]
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
