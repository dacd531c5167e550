"""
Integration Tests for Lead Intake Endpoints

Tests submission, validation, the honeypot and per-IP rate limiting.
"""

from unittest.mock import patch

import pytest

from app.config import settings
from app.tables import Lead

VALID_LEAD = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "service": "wedding",
    "phone": "+1 555 010 9999",
    "eventDate": "2026-06-20",
    "message": "Lake ceremony, about 80 guests.",
}


def test_valid_lead_is_stored(client, db_session):
    response = client.post("/api/leads", json=VALID_LEAD)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["leadId"]
    assert response.headers["X-RateLimit-Limit"] == "5"
    assert response.headers["X-RateLimit-Remaining"] == "4"
    assert int(response.headers["X-RateLimit-Reset"]) > 0

    lead = db_session.get(Lead, data["leadId"])
    assert lead.email == "ada@example.com"
    assert lead.event_date == "2026-06-20"
    assert lead.status == "new"
    assert lead.ip_address == "testclient"


@pytest.fixture
def behind_proxy():
    with patch.object(settings, "TRUST_PROXY_HEADERS", True):
        yield


def test_forwarded_address_is_recorded(client, db_session, behind_proxy):
    response = client.post(
        "/api/leads", json=VALID_LEAD, headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
    )

    assert db_session.get(Lead, response.json()["leadId"]).ip_address == "203.0.113.7"


def test_validation_errors_are_listed(client, db_session):
    response = client.post(
        "/api/leads", json={"name": "A", "email": "nope", "service": "birthday"}
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation failed",
        "details": [
            "Name is required (min 2 characters)",
            "Valid email address is required",
            "Invalid service type",
        ],
    }
    assert db_session.query(Lead).count() == 0


def test_honeypot_reports_success_without_storing(client, db_session):
    response = client.post("/api/leads", json={**VALID_LEAD, "honeypot": "http://spam"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert "leadId" not in response.json()
    assert db_session.query(Lead).count() == 0


def test_honeypot_skips_validation(client):
    response = client.post("/api/leads", json={"honeypot": "x"})
    assert response.status_code == 200


def test_sixth_submission_is_rate_limited(client, db_session):
    statuses = [client.post("/api/leads", json=VALID_LEAD).status_code for _ in range(6)]

    assert statuses == [201] * 5 + [429]
    assert db_session.query(Lead).count() == 5


def test_rate_limit_response_headers(client):
    for _ in range(5):
        client.post("/api/leads", json=VALID_LEAD)

    response = client.post("/api/leads", json=VALID_LEAD)

    assert response.status_code == 429
    assert response.json()["error"] == "Too many requests. Please try again later."
    assert int(response.headers["Retry-After"]) >= 1
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert response.json()["details"]["retryAfter"] == int(response.headers["Retry-After"])


def test_rate_limit_applies_before_validation(client):
    for _ in range(5):
        client.post("/api/leads", json={"name": "A"})

    response = client.post("/api/leads", json=VALID_LEAD)
    assert response.status_code == 429


def test_rate_limit_is_per_address(client, behind_proxy):
    for _ in range(5):
        client.post("/api/leads", json=VALID_LEAD, headers={"X-Real-IP": "198.51.100.2"})

    assert client.post("/api/leads", json=VALID_LEAD).status_code == 201


def test_rate_limit_status(client):
    initial = client.get("/api/leads").json()
    client.post("/api/leads", json=VALID_LEAD)
    after = client.get("/api/leads").json()

    assert initial == {"remaining": 5, "limit": 5, "resetAt": None}
    assert after["remaining"] == 4
    assert after["resetAt"] > 0


def test_rotating_forwarded_header_does_not_bypass_limit(client):
    statuses = [
        client.post(
            "/api/leads", json=VALID_LEAD, headers={"X-Forwarded-For": f"203.0.113.{n}"}
        ).status_code
        for n in range(6)
    ]

    assert statuses == [201] * 5 + [429]


def test_honeypot_with_wrong_typed_fields_still_reports_success(client, db_session):
    response = client.post("/api/leads", json={"name": 12, "email": [], "honeypot": "x"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert db_session.query(Lead).count() == 0


def test_wrong_typed_field_is_400(client):
    response = client.post("/api/leads", json={**VALID_LEAD, "name": 12})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request"
    assert response.json()["details"][0]["loc"] == ["name"]


def test_non_object_body_is_400(client):
    response = client.post("/api/leads", json=["not", "an", "object"])
    assert response.status_code == 400
