"""API tests for the invoicing endpoints."""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_sessionbook.db")
os.environ.setdefault("AWS_S3_BUCKET", "local")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/sessionbook-tests")

import pytest
from fastapi.testclient import TestClient

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


@pytest.fixture()
def studio(client: TestClient) -> dict:
    response = client.post(
        "/api/clients",
        json={
            "name": "Sunrise Yoga",
            "address": "Hauptstraße 5",
            "contact_email": "studio@example.com",
            "hourly_rate": "31.50",
        },
    )
    assert response.status_code == 201
    return response.json()


def _log_sessions(client: TestClient, client_id: int, statuses: list[str]) -> None:
    for day, status in enumerate(statuses, start=2):
        response = client.post(
            "/api/time-entries",
            json={
                "client_id": client_id,
                "title": "Vinyasa Flow",
                "start_at": f"2026-03-{day:02d}T18:00:00",
                "end_at": f"2026-03-{day:02d}T19:15:00",
                "status": status,
            },
        )
        assert response.status_code == 201


def test_health_endpoints(client: TestClient) -> None:
    assert client.get("/api/health/live").json() == {"status": "live"}
    assert client.get("/api/health/ready").json() == {"status": "ready"}
    assert client.get("/api/metrics").status_code == 200


def test_profile_is_created_on_put(client: TestClient) -> None:
    missing = client.get("/api/profile")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"

    saved = client.put(
        "/api/profile",
        json={"name": "Jo Example", "address": "Musterweg 3", "bank_details": "IBAN DE00"},
    )
    assert saved.status_code == 200
    assert client.get("/api/profile").json()["name"] == "Jo Example"


def test_generate_invoice_endpoint(client: TestClient, studio: dict) -> None:
    _log_sessions(client, studio["id"], ["completed", "cancelled", "completed"])

    response = client.post(
        "/api/invoices/generate",
        json={"client_id": studio["id"], "start_date": "2026-03-01", "end_date": "2026-03-31"},
    )

    assert response.status_code == 201
    body = response.json()
    assert re.fullmatch(r"\d{4}-\d{3}", body["number"])
    assert body["total_hours"] == "2.50"
    assert body["total_amount"] == "78.75"
    assert body["status"] == "created"
    assert body["client_name"] == "Sunrise Yoga"
    assert len(body["line_items"]) == 2

    listed = client.get("/api/invoices", params={"client_id": studio["id"]}).json()
    assert [item["id"] for item in listed] == [body["id"]]


def test_reversed_range_is_a_bad_request(client: TestClient, studio: dict) -> None:
    response = client.post(
        "/api/invoices/generate",
        json={"client_id": studio["id"], "start_date": "2026-03-31", "end_date": "2026-03-01"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_RANGE"
    assert client.get("/api/invoices").json() == []


def test_unknown_client_is_not_found(client: TestClient) -> None:
    response = client.post(
        "/api/invoices/generate",
        json={"client_id": 404, "start_date": "2026-03-01", "end_date": "2026-03-31"},
    )

    assert response.status_code == 404
    assert response.json()["status"] == "error"


def test_status_endpoint_enforces_lifecycle(client: TestClient, studio: dict) -> None:
    invoice = client.post(
        "/api/invoices/generate",
        json={"client_id": studio["id"], "start_date": "2026-03-01", "end_date": "2026-03-31"},
    ).json()
    url = f"/api/invoices/{invoice['id']}/status"

    skipped = client.put(url, json={"status": "paid", "paid_date": "2026-04-10"})
    assert skipped.status_code == 409
    assert skipped.json()["code"] == "INVALID_STATUS_TRANSITION"

    assert client.put(url, json={"status": "sent"}).json()["status"] == "sent"

    undated = client.put(url, json={"status": "paid"})
    assert undated.status_code == 422
    assert undated.json()["code"] == "VALIDATION_ERROR"

    paid = client.put(url, json={"status": "paid", "paid_date": "2026-04-10"})
    assert paid.json()["paid_date"] == "2026-04-10"


def test_pdf_download_and_delete(client: TestClient, studio: dict) -> None:
    _log_sessions(client, studio["id"], ["completed"])
    invoice = client.post(
        "/api/invoices/generate",
        json={
            "client_id": studio["id"],
            "start_date": "2026-03-01",
            "end_date": "2026-03-31",
            "language": "de",
        },
    ).json()

    pdf = client.get(f"/api/invoices/{invoice['id']}/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    assert client.delete(f"/api/invoices/{invoice['id']}").status_code == 204
    assert client.get(f"/api/invoices/{invoice['id']}").status_code == 404


def test_time_entry_status_endpoint(client: TestClient, studio: dict) -> None:
    created = client.post(
        "/api/time-entries",
        json={
            "client_id": studio["id"],
            "title": "Yin Yoga",
            "start_at": "2026-03-04T19:00:00",
            "end_at": "2026-03-04T20:30:00",
        },
    ).json()
    assert created["status"] == "scheduled"
    assert created["duration_hours"] == "1.50"

    url = f"/api/time-entries/{created['id']}/status"
    assert client.post(url, json={"status": "cancelled"}).json()["status"] == "cancelled"
    assert client.post(url, json={"status": "completed"}).status_code == 409

    by_client = client.get(f"/api/clients/{studio['id']}/time-entries").json()
    assert [entry["id"] for entry in by_client] == [created["id"]]


def test_invalid_entry_times_are_rejected(client: TestClient, studio: dict) -> None:
    response = client.post(
        "/api/time-entries",
        json={
            "client_id": studio["id"],
            "title": "Yin Yoga",
            "start_at": "2026-03-04T20:00:00",
            "end_at": "2026-03-04T19:00:00",
        },
    )

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_dashboard_metrics_endpoint(client: TestClient) -> None:
    response = client.get("/api/dashboard/metrics", params={"period": "year", "year": 2026})

    assert response.status_code == 200
    body = response.json()
    assert body["period_start"] == "2026-01-01"
    assert body["invoice_count"] == 0
    assert body["revenue"] == "0.00"


def test_blank_client_name_is_unprocessable(client: TestClient) -> None:
    response = client.post("/api/clients", json={"name": "   ", "hourly_rate": "30.00"})

    assert response.status_code == 422
    assert response.json() == {
        "error": "Client name must not be empty",
        "status": "error",
        "code": "VALIDATION_ERROR",
        "details": None,
    }
